"""Shared fixtures for the test suite."""

import cv2
import numpy as np
import pytest

from circlefinder.detection.base import DetectedCircle


@pytest.fixture
def blank_image():
    return np.zeros((100, 100, 3), dtype=np.uint8)


@pytest.fixture
def image_file(tmp_path, blank_image):
    path = tmp_path / "blank.png"
    cv2.imwrite(str(path), blank_image)
    return path


@pytest.fixture
def disk_image():
    """200x200 image with a filled white disk of radius 40 at the center."""
    image = np.zeros((200, 200, 3), dtype=np.uint8)
    cv2.circle(image, (100, 100), 40, (255, 255, 255), -1)
    return image


@pytest.fixture
def centered_circle():
    return DetectedCircle(50.0, 50.0, 30.0)
