"""
circlefinder - parallel parameter search for single circle detection

Searches Canny / accumulator threshold pairs for the circle that best
matches a target diameter while sitting closest to the image center.
"""

from .config import SearchConfig, load_config, load_search_config
from .core import CircleFinder, find_single_circle
from .detection import DetectedCircle, HoughCircleDetector, ContourCircleDetector
from .reporting.events import SearchEvents, LoggingReporter
from .search.models import ScoredCandidate, SearchResult

__all__ = ['CircleFinder', 'find_single_circle', 'SearchConfig', 'load_config',
           'load_search_config', 'DetectedCircle', 'HoughCircleDetector',
           'ContourCircleDetector', 'SearchEvents', 'LoggingReporter',
           'ScoredCandidate', 'SearchResult']
__version__ = '1.0.0'
