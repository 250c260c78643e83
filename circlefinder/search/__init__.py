"""Grid search over detector thresholds."""
