"""Detector adapter interface and the circle type it produces."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union

import cv2
import numpy as np

from circlefinder.exceptions import InvalidArgumentError
from circlefinder.utils.io_handler import save_image
from circlefinder.utils.visualization import RED, draw_circles


@dataclass(frozen=True)
class DetectedCircle:
    """A circle in image pixel coordinates."""

    x: float
    y: float
    radius: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def diameter(self) -> float:
        return self.radius * 2

    def distance_to(self, point: Tuple[float, float]) -> float:
        """Euclidean distance from the circle center to a point."""
        return math.hypot(self.x - point[0], self.y - point[1])

    def as_int_tuple(self) -> Tuple[int, int, int]:
        """(x, y, radius) truncated to ints, the form OpenCV drawing expects."""
        return (int(self.x), int(self.y), int(self.radius))


class CircleDetector(ABC):
    """
    Something that finds circles in an image for a given pair of thresholds.

    Implementations must not modify the image they are handed. The search
    gives every call its own copy, so an implementation only needs to be
    safe when called concurrently on different arrays.
    """

    @abstractmethod
    def detect(self, image: np.ndarray, min_radius: int, max_radius: int,
               canny_threshold: float, accumulator_threshold: float,
               min_separation: float) -> List[DetectedCircle]:
        """
        Detect circles in image.

        Args:
            image: BGR or grayscale image
            min_radius: Minimum circle radius in pixels
            max_radius: Maximum circle radius in pixels
            canny_threshold: Upper threshold of the edge detection step
            accumulator_threshold: How strong a circular pattern must be to count
            min_separation: Minimum distance between reported centers

        Returns:
            Detected circles, possibly empty, in no particular order
        """

    def process_and_save(self, image: np.ndarray, output_path: Union[str, Path],
                         min_radius: int = 10, max_radius: int = 100,
                         canny_threshold: float = 100.0, accumulator_threshold: float = 50.0,
                         min_separation: float = 20.0) -> List[str]:
        """
        Detect once with fixed thresholds, save the circles drawn on a copy
        of image to output_path and describe what was found.

        Returns:
            One line per detected circle, as produced by describe_circles
        """
        if image is None:
            raise InvalidArgumentError("Image cannot be None")
        if not output_path:
            raise InvalidArgumentError("Output path cannot be empty")

        circles = self.detect(image, min_radius, max_radius, canny_threshold,
                              accumulator_threshold, min_separation)
        if not save_image(draw_circles(image, circles, RED, 2), output_path):
            raise OSError(f"Could not write {output_path}")
        return describe_circles(circles)

    @staticmethod
    def check_radius_bounds(min_radius: int, max_radius: int):
        if min_radius <= 0:
            raise InvalidArgumentError(
                f"Minimum radius must be greater than 0, got {min_radius}")
        if max_radius <= min_radius:
            raise InvalidArgumentError(
                f"Maximum radius must be greater than minimum radius, got {max_radius} <= {min_radius}")


def to_gray(image: np.ndarray) -> np.ndarray:
    """Grayscale copy of a BGR image, or a copy of an already gray one."""
    if image is None:
        raise InvalidArgumentError("Image cannot be None")
    if len(image.shape) == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if len(image.shape) == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return image.copy()


def describe_circles(circles: List[DetectedCircle]) -> List[str]:
    """One human-readable line per circle."""
    return [
        f"Circle {i + 1}: Center=({c.x:.1f}, {c.y:.1f}), Radius={c.radius:.1f}"
        for i, c in enumerate(circles)
    ]
