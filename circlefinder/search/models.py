"""Result types produced by a parameter search."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from circlefinder.detection.base import DetectedCircle
from circlefinder.search.grid import ParameterCombination


@dataclass(frozen=True)
class ScoredCandidate:
    """Best circle of one grid cell together with its errors and score."""

    circle: DetectedCircle
    parameters: ParameterCombination
    size_difference: float
    center_distance: float
    score: float

    @property
    def canny_threshold(self):
        return self.parameters.canny_threshold

    @property
    def accumulator_threshold(self):
        return self.parameters.accumulator_threshold


@dataclass
class SearchResult:
    """Outcome of a whole search: the global best (if any) plus counters."""

    best: Optional[ScoredCandidate]
    combinations_tested: int
    circles_found: int
    total_combinations: int = 0
    cancelled: bool = False
    elapsed_ms: float = 0.0

    @property
    def circle(self) -> Optional[DetectedCircle]:
        return self.best.circle if self.best is not None else None

    @property
    def found(self) -> bool:
        return self.best is not None

    def parameters_dict(self, target_diameter: float, size_weight: float,
                        center_weight: float) -> Dict[str, Any]:
        """Winning parameters plus the settings they were found with."""
        return {
            'canny_threshold': self.best.canny_threshold if self.best else None,
            'accumulator_threshold': self.best.accumulator_threshold if self.best else None,
            'target_diameter': target_diameter,
            'size_weight': size_weight,
            'center_weight': center_weight,
        }

    def result_info(self, target_diameter: float) -> Dict[str, Any]:
        """Counters and error figures; error figures are None without a match."""
        info = {
            'combinations_tested': self.combinations_tested,
            'total_combinations': self.total_combinations,
            'circles_found': self.circles_found,
            'cancelled': self.cancelled,
            'processing_time_ms': round(self.elapsed_ms, 2),
            'score': None,
            'diameter_difference': None,
            'diameter_difference_percent': None,
            'center_distance': None,
        }
        if self.best is not None:
            info.update({
                'score': self.best.score,
                'diameter_difference': self.best.size_difference,
                'diameter_difference_percent': self.best.size_difference / target_diameter * 100,
                'center_distance': self.best.center_distance,
            })
        return info
