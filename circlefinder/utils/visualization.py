"""Visualization utilities for annotating search results."""

import cv2
import numpy as np
from typing import List, Tuple

RED = (0, 0, 255)
GREEN = (0, 255, 0)
CYAN = (255, 255, 0)
YELLOW = (0, 255, 255)

CROSSHAIR_SIZE = 10


def _point(xy) -> Tuple[int, int]:
    return (int(xy[0]), int(xy[1]))


def draw_circle(image: np.ndarray, center: Tuple[float, float], radius: float,
                color: Tuple[int, int, int] = RED, thickness: int = 2) -> np.ndarray:
    """Draw a circle outline with a marked center on a copy of image."""
    output = image.copy()
    cv2.circle(output, _point(center), int(radius), color, thickness)
    cv2.circle(output, _point(center), 2, GREEN, -1)
    return output


def draw_circles(image: np.ndarray, circles: List, color: Tuple[int, int, int] = RED,
                 thickness: int = 2) -> np.ndarray:
    """Draw several DetectedCircles on a copy of image."""
    output = _ensure_bgr(image).copy()
    for circle in circles:
        x, y, r = circle.as_int_tuple()
        cv2.circle(output, (x, y), r, color, thickness)
        cv2.circle(output, (x, y), 2, GREEN, -1)
    return output


def draw_line(image: np.ndarray, start: Tuple[float, float], end: Tuple[float, float],
              color: Tuple[int, int, int] = CYAN, thickness: int = 1) -> np.ndarray:
    output = image.copy()
    cv2.line(output, _point(start), _point(end), color, thickness)
    return output


def draw_text(image: np.ndarray, text: str, origin: Tuple[float, float],
              color: Tuple[int, int, int] = GREEN, scale: float = 0.5,
              thickness: int = 1) -> np.ndarray:
    output = image.copy()
    cv2.putText(output, text, _point(origin), cv2.FONT_HERSHEY_COMPLEX, scale, color, thickness)
    return output


def draw_crosshair(image: np.ndarray, center: Tuple[float, float], size: int = CROSSHAIR_SIZE,
                   color: Tuple[int, int, int] = YELLOW, thickness: int = 1) -> np.ndarray:
    """Draw a '+' marker at center."""
    cx, cy = _point(center)
    output = draw_line(image, (cx - size, cy), (cx + size, cy), color, thickness)
    return draw_line(output, (cx, cy - size), (cx, cy + size), color, thickness)


def _ensure_bgr(image: np.ndarray) -> np.ndarray:
    if len(image.shape) == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    return image


def _annotate_geometry(image: np.ndarray, candidate, image_center: Tuple[float, float]) -> np.ndarray:
    circle = candidate.circle
    output = draw_circle(_ensure_bgr(image), circle.center, circle.radius, RED, 2)
    output = draw_line(output, image_center, circle.center, CYAN, 1)
    return draw_crosshair(output, image_center)


def annotate_candidate(image: np.ndarray, candidate, image_center: Tuple[float, float]) -> np.ndarray:
    """Circle, center line, crosshair and a one-line caption for a ranked candidate."""
    output = _annotate_geometry(image, candidate, image_center)
    circle = candidate.circle
    caption = (f"C{candidate.canny_threshold} A{candidate.accumulator_threshold} "
               f"D={circle.diameter:.1f}px Dist={candidate.center_distance:.1f}px")
    origin = (circle.x - circle.radius, circle.y - circle.radius - 10)
    return draw_text(output, caption, origin, GREEN, 0.5, 1)


def annotate_best(image: np.ndarray, candidate, image_center: Tuple[float, float]) -> np.ndarray:
    """Annotation for the winning circle, with a larger caption and the center distance."""
    output = _annotate_geometry(image, candidate, image_center)
    circle = candidate.circle
    left = circle.x - circle.radius
    top = circle.y - circle.radius

    caption = (f"BEST: C{candidate.canny_threshold} A{candidate.accumulator_threshold} "
               f"D={circle.diameter:.1f}px")
    output = draw_text(output, caption, (left, top - 10), GREEN, 0.7, 2)
    return draw_text(output, f"Center dist: {candidate.center_distance:.1f}px",
                     (left, top - 35), GREEN, 0.6, 1)
