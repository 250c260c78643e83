"""I/O handling for images, JSON output and summaries."""

import cv2
import json
import logging
import numpy as np
from pathlib import Path
from typing import Dict, Union

from circlefinder.exceptions import ImageLoadError, InvalidArgumentError, MissingResourceError

logger = logging.getLogger(__name__)


class JSONWriter:
    """Write search results to JSON."""

    @staticmethod
    def save_results(output_dict: Dict, output_path: str, indent: int = 2):
        """Save results to JSON file."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(output_dict, f, indent=indent)


def save_image(image: np.ndarray, output_path: Union[str, Path]) -> bool:
    """Save image to file, creating parent directories. Returns False on failure."""
    if image is None:
        raise InvalidArgumentError("Image cannot be None")
    if not output_path:
        raise InvalidArgumentError("Output path cannot be empty")

    try:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        return bool(cv2.imwrite(str(output_path), image))
    except (OSError, cv2.error) as e:
        logger.warning(f"Could not save image to {output_path}: {e}")
        return False


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """Load a color image from file."""
    if not image_path:
        raise InvalidArgumentError("Image path cannot be empty")
    if not Path(image_path).is_file():
        raise MissingResourceError(f"Image file not found: {image_path}")

    image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if image is None:
        raise ImageLoadError(f"Failed to decode image: {image_path}")
    return image


def write_text(lines, output_path: Union[str, Path]):
    """Write lines of text to a file, one per line."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        for line in lines:
            f.write(f"{line}\n")
