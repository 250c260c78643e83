"""Circle detection from edge contours and circularity."""

import math

import cv2
import numpy as np
from typing import List, Tuple

from circlefinder.detection.base import CircleDetector, DetectedCircle, to_gray
from circlefinder.detection.circle_fit import CircleFitter


class ContourCircleDetector(CircleDetector):
    """
    Finds round contours in a Canny edge map.

    The two search thresholds are mapped onto this detector as follows:
    canny_threshold is the upper Canny threshold (the lower one is half of it)
    and accumulator_threshold is read as a minimum circularity percentage,
    so 80 keeps contours with 4*pi*area/perimeter^2 >= 0.8.
    """

    def __init__(self, blur_kernel: int = 5, refine: bool = True):
        self.blur_kernel = blur_kernel
        self.refine = refine
        self.fitter = CircleFitter()

    def detect(self, image: np.ndarray, min_radius: int, max_radius: int,
               canny_threshold: float, accumulator_threshold: float,
               min_separation: float) -> List[DetectedCircle]:
        """
        Detect circles in image.

        Args:
            image: Input BGR or grayscale image
            min_radius: Minimum circle radius
            max_radius: Maximum circle radius
            canny_threshold: Upper Canny threshold
            accumulator_threshold: Minimum circularity, in percent
            min_separation: Minimum distance between circle centers

        Returns:
            List of detected circles
        """
        self.check_radius_bounds(min_radius, max_radius)
        circularity_threshold = self.circularity_threshold(accumulator_threshold)

        gray = to_gray(image)
        if self.blur_kernel > 1:
            gray = cv2.GaussianBlur(gray, (self.blur_kernel, self.blur_kernel), 0)

        edges = cv2.Canny(gray, canny_threshold / 2, canny_threshold)
        # Close small gaps so the rim forms one contour
        edges = cv2.dilate(edges, np.ones((3, 3), np.uint8), iterations=1)

        contours, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)

        candidates = []
        for contour in contours:
            area = cv2.contourArea(contour)
            if area < math.pi * min_radius * min_radius or area > math.pi * max_radius * max_radius:
                continue

            perimeter = cv2.arcLength(contour, True)
            if perimeter == 0:
                continue

            circularity = 4 * math.pi * area / (perimeter * perimeter)
            if circularity < circularity_threshold:
                continue

            circle = self._circle_from_contour(contour, area)
            if circle is None or not (min_radius <= circle.radius <= max_radius):
                continue

            candidates.append((area, circle))

        return self._suppress_close(candidates, min_separation)

    @staticmethod
    def circularity_threshold(accumulator_threshold: float) -> float:
        """Map an accumulator-style threshold onto (0, 1]."""
        return min(max(accumulator_threshold / 100.0, 1e-6), 1.0)

    def _circle_from_contour(self, contour: np.ndarray, area: float):
        moments = cv2.moments(contour)
        if moments["m00"] == 0:
            return None

        cx = moments["m10"] / moments["m00"]
        cy = moments["m01"] / moments["m00"]

        points = contour.reshape(-1, 2).astype(np.float64)
        area_radius = math.sqrt(area / math.pi)
        point_radius = float(np.hypot(points[:, 0] - cx, points[:, 1] - cy).mean())
        radius = (area_radius + point_radius) / 2

        if self.refine and len(points) >= 3:
            cx, cy, radius = self.fitter.fit(points, initial=(cx, cy, radius))

        return DetectedCircle(float(cx), float(cy), float(radius))

    @staticmethod
    def _suppress_close(candidates: List[Tuple[float, DetectedCircle]],
                        min_separation: float) -> List[DetectedCircle]:
        """Keep the larger contour whenever two centers are closer than min_separation."""
        kept: List[DetectedCircle] = []
        for _, circle in sorted(candidates, key=lambda item: item[0], reverse=True):
            if all(circle.distance_to(other.center) >= min_separation for other in kept):
                kept.append(circle)
        return kept

    @classmethod
    def from_config(cls, config: dict) -> "ContourCircleDetector":
        """Build from the 'contour' section of a config dict."""
        section = config.get("contour", {})
        return cls(blur_kernel=section.get("blur_kernel", 5),
                   refine=section.get("refine", True))
