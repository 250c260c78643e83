"""Parallel evaluation of the parameter grid."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from circlefinder.detection.base import CircleDetector
from circlefinder.reporting.events import SearchEvents
from circlefinder.search.grid import ParameterCombination
from circlefinder.search.models import ScoredCandidate
from circlefinder.search.scorer import CircleScorer, image_geometry

logger = logging.getLogger(__name__)

# Radius window handed to the detector, relative to the target radius
MIN_RADIUS_FACTOR = 0.7
MAX_RADIUS_FACTOR = 1.3
# Minimum center separation, relative to the target diameter
MIN_SEPARATION_FACTOR = 0.5
# Only candidates scoring below this are kept for intermediate export
GOOD_MATCH_SCORE = 0.15
PROGRESS_INTERVAL = 100


def radius_bounds(target_diameter: float) -> Tuple[int, int]:
    """(min_radius, max_radius) passed to the detector for a target diameter."""
    radius = target_diameter / 2
    return max(int(radius * MIN_RADIUS_FACTOR), 1), int(radius * MAX_RADIUS_FACTOR)


def min_separation(target_diameter: float) -> float:
    return target_diameter * MIN_SEPARATION_FACTOR


@dataclass
class EvaluationOutcome:
    """Everything the parallel phase produced, read only after it has finished."""

    results: List[ScoredCandidate] = field(default_factory=list)
    export_candidates: List[ScoredCandidate] = field(default_factory=list)
    processed: int = 0
    circles_found: int = 0
    skipped: int = 0
    total: int = 0
    failures: int = 0

    @property
    def cancelled(self) -> bool:
        return self.skipped > 0


class _SharedState:
    """Result list and counters written by all workers under one lock."""

    def __init__(self, total: int, events: SearchEvents):
        self.lock = threading.Lock()
        self.events = events
        self.outcome = EvaluationOutcome(total=total)

    def publish(self, candidate: ScoredCandidate, export: bool):
        with self.lock:
            self.outcome.results.append(candidate)
            self.outcome.circles_found += 1
            if export:
                self.outcome.export_candidates.append(candidate)

    def record_failure(self):
        with self.lock:
            self.outcome.failures += 1

    def skip(self):
        with self.lock:
            self.outcome.skipped += 1

    def complete(self):
        with self.lock:
            self.outcome.processed += 1
            processed = self.outcome.processed
            total = self.outcome.total
            if processed % PROGRESS_INTERVAL == 0 or processed == total:
                self.events.emit_progress(
                    processed, total, f"Testing parameter combinations: {processed}/{total}")


class ParallelEvaluator:
    """
    Runs the detector once per grid cell on a bounded thread pool.

    Each cell works on its own copy of the image, keeps the best-scoring
    circle it got back and publishes it if it is within the diameter
    tolerance. No cell reads another cell's state; the caller only sees
    the results once every cell has finished.
    """

    def __init__(self, detector: CircleDetector, config,
                 events: Optional[SearchEvents] = None):
        self.detector = detector
        self.config = config
        self.events = events or SearchEvents()
        self.scorer = CircleScorer(*config.normalized_weights())
        self.min_radius, self.max_radius = radius_bounds(config.target_diameter)
        self.min_separation = min_separation(config.target_diameter)

    def run(self, image: np.ndarray, grid: List[ParameterCombination],
            cancel_event: Optional[threading.Event] = None) -> EvaluationOutcome:
        """
        Evaluate every combination in grid against image.

        Args:
            image: Source image; treated as read-only
            grid: Parameter combinations to test
            cancel_event: Optional event; cells that start after it is set are skipped

        Returns:
            EvaluationOutcome with all qualifying candidates and counters
        """
        image_center, image_size = image_geometry(image)
        state = _SharedState(len(grid), self.events)
        workers = self.config.resolve_workers()

        logger.debug(f"Evaluating {len(grid)} combinations on {workers} workers")

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='circle-search') as executor:
            futures = [
                executor.submit(self._evaluate, image, combination, image_center,
                                image_size, state, cancel_event)
                for combination in grid
            ]
            for future in futures:
                future.result()

        return state.outcome

    def _evaluate(self, image: np.ndarray, combination: ParameterCombination,
                  image_center: Tuple[float, float], image_size: Tuple[int, int],
                  state: _SharedState, cancel_event: Optional[threading.Event]):
        if cancel_event is not None and cancel_event.is_set():
            state.skip()
            return

        try:
            candidate = self.evaluate_combination(image.copy(), combination, image_center, image_size)
            if candidate is not None:
                export = self.config.saves_intermediate and candidate.score < GOOD_MATCH_SCORE
                state.publish(candidate, export)
        except Exception as e:
            state.record_failure()
            logger.debug(f"Combination {combination.label()} failed", exc_info=True)
            self.events.emit_status(f"Error testing {combination.label()}: {e}", True)
        finally:
            state.complete()

    def evaluate_combination(self, image: np.ndarray, combination: ParameterCombination,
                             image_center: Tuple[float, float],
                             image_size: Tuple[int, int]) -> Optional[ScoredCandidate]:
        """
        Detect, score and filter for a single grid cell.

        Returns:
            The cell's best candidate if it is within tolerance, otherwise None
        """
        circles = self.detector.detect(
            image,
            min_radius=self.min_radius,
            max_radius=self.max_radius,
            canny_threshold=combination.canny_threshold,
            accumulator_threshold=combination.accumulator_threshold,
            min_separation=self.min_separation,
        )
        if not circles:
            return None

        best = self.scorer.select_best(circles, combination, self.config.target_diameter,
                                       image_center, image_size)

        tolerance = self.config.diameter_tolerance
        if tolerance <= 0 or best.size_difference <= tolerance:
            return best
        return None
