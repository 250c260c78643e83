"""Parameter grid construction."""

import math
from dataclasses import dataclass
from typing import List, Union

from circlefinder.exceptions import InvalidArgumentError

Number = Union[int, float]

# Absorbs float error so that e.g. 0.1..0.3 step 0.1 keeps its end point
_EPSILON = 1e-9


@dataclass(frozen=True, order=True)
class ParameterCombination:
    """One cell of the search grid."""

    canny_threshold: Number
    accumulator_threshold: Number

    def as_tuple(self):
        return (self.canny_threshold, self.accumulator_threshold)

    def label(self) -> str:
        return f"C{self.canny_threshold} A{self.accumulator_threshold}"


def axis_count(start: Number, end: Number, step: Number) -> int:
    """Number of values in the inclusive range start..end stepped by step."""
    if step <= 0:
        raise InvalidArgumentError(f"Step must be greater than 0, got {step}")
    if start > end:
        return 0
    return int(math.floor((end - start) / step + _EPSILON)) + 1


def axis_values(start: Number, end: Number, step: Number) -> List[Number]:
    """
    Inclusive range of values for one grid axis.

    Integer inputs give integer values; otherwise each value is computed as
    start + i * step rather than accumulated.
    """
    count = axis_count(start, end, step)
    if isinstance(start, int) and isinstance(step, int):
        return [start + i * step for i in range(count)]
    return [float(start) + i * float(step) for i in range(count)]


def build_grid(canny_start: Number, canny_end: Number, canny_step: Number,
               accum_start: Number, accum_end: Number, accum_step: Number) -> List[ParameterCombination]:
    """
    Cartesian product of the two axes, Canny outer and accumulator inner.

    An inverted range on either axis gives an empty grid.
    """
    canny_values = axis_values(canny_start, canny_end, canny_step)
    accum_values = axis_values(accum_start, accum_end, accum_step)
    return [
        ParameterCombination(canny, accum)
        for canny in canny_values
        for accum in accum_values
    ]


def grid_from_config(config) -> List[ParameterCombination]:
    """Build the grid described by a SearchConfig."""
    return build_grid(config.canny_start, config.canny_end, config.canny_step,
                      config.accum_start, config.accum_end, config.accum_step)
