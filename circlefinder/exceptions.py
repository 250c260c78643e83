"""Exception types raised by circlefinder."""


class CircleFinderError(Exception):
    """Base class for all circlefinder errors."""


class InvalidArgumentError(CircleFinderError, ValueError):
    """Malformed search configuration or detector arguments."""


class MissingResourceError(CircleFinderError, FileNotFoundError):
    """An input file (image or config) does not exist."""


class ImageLoadError(CircleFinderError):
    """An image file exists but could not be decoded."""
