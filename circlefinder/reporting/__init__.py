"""Search notifications and persisted artifacts."""
