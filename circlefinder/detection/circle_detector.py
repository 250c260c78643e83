"""Circle detection using Hough Circle Transform."""

import cv2
import numpy as np
from typing import List

from circlefinder.detection.base import CircleDetector, DetectedCircle, to_gray


class HoughCircleDetector(CircleDetector):
    """Detects circles with OpenCV's gradient Hough transform."""

    def __init__(self, dp: float = 1.0, blur_kernel: int = 5, blur_sigma: float = 1.5):
        self.dp = dp
        self.blur_kernel = blur_kernel
        self.blur_sigma = blur_sigma

    def detect(self, image: np.ndarray, min_radius: int, max_radius: int,
               canny_threshold: float, accumulator_threshold: float,
               min_separation: float) -> List[DetectedCircle]:
        """
        Detect circles in image.

        Args:
            image: Input BGR or grayscale image
            min_radius: Minimum circle radius
            max_radius: Maximum circle radius
            canny_threshold: Higher threshold passed to the internal Canny detector
            accumulator_threshold: Accumulator threshold for circle centers
            min_separation: Minimum distance between circle centers

        Returns:
            List of detected circles
        """
        self.check_radius_bounds(min_radius, max_radius)

        gray = to_gray(image)
        blurred = cv2.GaussianBlur(gray, (self.blur_kernel, self.blur_kernel), self.blur_sigma)

        circles = cv2.HoughCircles(blurred, cv2.HOUGH_GRADIENT, self.dp, float(min_separation),
                                   param1=float(canny_threshold),
                                   param2=float(accumulator_threshold),
                                   minRadius=int(min_radius), maxRadius=int(max_radius))

        if circles is None:
            return []

        return [DetectedCircle(float(x), float(y), float(r)) for x, y, r in circles[0, :]]

    @classmethod
    def from_config(cls, config: dict) -> "HoughCircleDetector":
        """Build from the 'hough' section of a config dict."""
        section = config.get("hough", {})
        return cls(dp=section.get("dp", 1.0),
                   blur_kernel=section.get("blur_kernel", 5),
                   blur_sigma=section.get("blur_sigma", 1.5))
