"""Stub detector adapters used across the test suite."""

import threading

from circlefinder.detection.base import CircleDetector


class StubDetector(CircleDetector):
    """Returns canned circles per (canny, accumulator) pair and records every call."""

    def __init__(self, responses=None, default=()):
        self.responses = responses or {}
        self.default = list(default)
        self.calls = []
        self._lock = threading.Lock()

    def detect(self, image, min_radius, max_radius, canny_threshold,
               accumulator_threshold, min_separation):
        with self._lock:
            self.calls.append({
                'image': image,
                'min_radius': min_radius,
                'max_radius': max_radius,
                'canny_threshold': canny_threshold,
                'accumulator_threshold': accumulator_threshold,
                'min_separation': min_separation,
            })
        return list(self.responses.get((canny_threshold, accumulator_threshold), self.default))


class FailingDetector(StubDetector):
    """Raises for the listed parameter pairs and behaves like StubDetector otherwise."""

    def __init__(self, failing, responses=None, default=()):
        super().__init__(responses, default)
        self.failing = set(failing)

    def detect(self, image, min_radius, max_radius, canny_threshold,
               accumulator_threshold, min_separation):
        if (canny_threshold, accumulator_threshold) in self.failing:
            raise RuntimeError("detector exploded")
        return super().detect(image, min_radius, max_radius, canny_threshold,
                              accumulator_threshold, min_separation)


class MutatingDetector(StubDetector):
    """Scribbles over the image it is given, to prove it only ever sees a copy."""

    def detect(self, image, min_radius, max_radius, canny_threshold,
               accumulator_threshold, min_separation):
        image[:] = 255
        return super().detect(image, min_radius, max_radius, canny_threshold,
                              accumulator_threshold, min_separation)
