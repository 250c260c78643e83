"""Scoring of detected circles against the target size and image center."""

import math
from typing import Tuple

from circlefinder.exceptions import InvalidArgumentError
from circlefinder.search.models import ScoredCandidate


def normalize_weights(size_weight: float, center_weight: float) -> Tuple[float, float]:
    """
    Rescale a weight pair so it sums to 1.

    Negative weights, or two zero weights, cannot be rescaled and raise
    InvalidArgumentError. Pairs that already sum to 1 come back unchanged.
    """
    if size_weight < 0 or center_weight < 0:
        raise InvalidArgumentError(
            f"Weights cannot be negative, got size={size_weight}, center={center_weight}")

    total = size_weight + center_weight
    if total <= 0:
        raise InvalidArgumentError("At least one weight must be greater than 0")

    if math.isclose(total, 1.0, rel_tol=0.0, abs_tol=1e-12):
        return float(size_weight), float(center_weight)
    return size_weight / total, center_weight / total


def image_geometry(image) -> Tuple[Tuple[float, float], Tuple[int, int]]:
    """Center point and (width, height) of a numpy image."""
    height, width = image.shape[:2]
    return (width / 2.0, height / 2.0), (width, height)


class CircleScorer:
    """
    Combined size and center-proximity error for a circle; lower is better.

    Both terms are normalized: the size term by the target diameter and the
    center term by half the image diagonal. A circle of exactly the target
    diameter sitting on the image center scores 0. Scores are not clamped.
    """

    def __init__(self, size_weight: float = 0.7, center_weight: float = 0.3):
        self.size_weight, self.center_weight = normalize_weights(size_weight, center_weight)

    def score(self, circle, target_diameter: float,
              image_center: Tuple[float, float], image_size: Tuple[int, int]) -> float:
        """
        Score one circle.

        Args:
            circle: DetectedCircle to evaluate
            target_diameter: Diameter being searched for, in pixels
            image_center: (x, y) center of the image
            image_size: (width, height) of the image

        Returns:
            Weighted sum of the normalized size and center errors
        """
        if target_diameter <= 0:
            raise InvalidArgumentError(
                f"Target diameter must be greater than 0, got {target_diameter}")

        size_term = self.size_difference(circle, target_diameter) / target_diameter

        half_diagonal = math.hypot(image_size[0], image_size[1]) / 2
        if half_diagonal <= 0:
            raise InvalidArgumentError(f"Image size must be non-empty, got {image_size}")
        center_term = self.center_distance(circle, image_center) / half_diagonal

        return self.size_weight * size_term + self.center_weight * center_term

    @staticmethod
    def size_difference(circle, target_diameter: float) -> float:
        """Absolute difference between the circle diameter and the target, in pixels."""
        return abs(circle.radius * 2 - target_diameter)

    @staticmethod
    def center_distance(circle, image_center: Tuple[float, float]) -> float:
        """Distance from the circle center to the image center, in pixels."""
        return math.hypot(circle.x - image_center[0], circle.y - image_center[1])

    def evaluate(self, circle, parameters, target_diameter: float,
                 image_center: Tuple[float, float], image_size: Tuple[int, int]):
        """Score a circle and wrap it as a ScoredCandidate."""
        return ScoredCandidate(
            circle=circle,
            parameters=parameters,
            size_difference=self.size_difference(circle, target_diameter),
            center_distance=self.center_distance(circle, image_center),
            score=self.score(circle, target_diameter, image_center, image_size),
        )

    def select_best(self, circles, parameters, target_diameter: float,
                    image_center: Tuple[float, float], image_size: Tuple[int, int]):
        """
        Lowest-scoring circle of one detector call as a ScoredCandidate.

        Ties keep the circle seen first. Returns None for an empty sequence.
        """
        best = None
        for circle in circles:
            candidate = self.evaluate(circle, parameters, target_diameter, image_center, image_size)
            if best is None or candidate.score < best.score:
                best = candidate
        return best
