"""Circle refinement using non-linear least squares."""

import numpy as np
from scipy.optimize import least_squares
from typing import Optional, Tuple


class CircleFitter:
    """Refine a circle estimate against a set of boundary points."""

    def __init__(self, max_iters: int = 100):
        self.max_iters = max_iters

    def fit(self, points: np.ndarray,
            initial: Optional[Tuple[float, float, float]] = None) -> Tuple[float, float, float]:
        """
        Fit a circle to 2D points by minimizing radial residuals.

        Args:
            points: (N, 2) array of x, y coordinates
            initial: Optional (x, y, radius) starting guess

        Returns:
            Fitted (x, y, radius)
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        if len(points) < 3:
            raise ValueError("At least 3 points are needed to fit a circle")

        if initial is None:
            initial = self._initial_guess(points)

        def residuals(params):
            cx, cy, r = params
            return np.hypot(points[:, 0] - cx, points[:, 1] - cy) - r

        result = least_squares(residuals, np.asarray(initial, dtype=np.float64),
                               method='lm', max_nfev=self.max_iters)
        cx, cy, r = result.x
        return float(cx), float(cy), float(abs(r))

    def _initial_guess(self, points: np.ndarray) -> Tuple[float, float, float]:
        """Centroid and mean distance to it."""
        cx, cy = points.mean(axis=0)
        r = np.hypot(points[:, 0] - cx, points[:, 1] - cy).mean()
        return float(cx), float(cy), float(r)
