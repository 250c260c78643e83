"""Circle detector adapters."""

from circlefinder.exceptions import InvalidArgumentError

from .base import CircleDetector, DetectedCircle, describe_circles
from .circle_detector import HoughCircleDetector
from .contour_detector import ContourCircleDetector

DETECTORS = {
    'hough': HoughCircleDetector,
    'contour': ContourCircleDetector,
}


def create_detector(name: str = 'hough', config: dict = None) -> CircleDetector:
    """Build a detector by name, reading its section of config."""
    if name not in DETECTORS:
        raise InvalidArgumentError(f"Unknown detector '{name}', expected one of {sorted(DETECTORS)}")
    return DETECTORS[name].from_config(config or {})


__all__ = ['CircleDetector', 'DetectedCircle', 'HoughCircleDetector',
           'ContourCircleDetector', 'create_detector', 'describe_circles']
