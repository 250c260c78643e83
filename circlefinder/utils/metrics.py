"""Timing of search phases."""

from time import perf_counter


class PerformanceMetrics:
    """Track how long named phases of a search take."""

    def __init__(self):
        self.start_times = {}

    def start_timer(self, name: str):
        """Start timing an operation."""
        self.start_times[name] = perf_counter()

    def stop_timer(self, name: str) -> float:
        """Stop timing and return duration in milliseconds."""
        if name not in self.start_times:
            return 0.0
        return (perf_counter() - self.start_times.pop(name)) * 1000
