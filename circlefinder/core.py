"""
circlefinder Core
Main entry point for the single circle parameter search
"""

from typing import Any, Dict, Optional, Union
from pathlib import Path
import logging
import threading

import numpy as np

from circlefinder.config import SearchConfig
from circlefinder.detection.base import CircleDetector, DetectedCircle
from circlefinder.detection.circle_detector import HoughCircleDetector
from circlefinder.reporting.artifacts import ArtifactWriter, search_log_dir
from circlefinder.reporting.events import SearchEvents
from circlefinder.search.grid import grid_from_config
from circlefinder.search.models import SearchResult
from circlefinder.search.reducer import rank_candidates, select_best
from circlefinder.search.evaluator import ParallelEvaluator
from circlefinder.search.scorer import image_geometry
from circlefinder.utils.io_handler import load_image
from circlefinder.utils.metrics import PerformanceMetrics

logger = logging.getLogger(__name__)


class CircleFinder:
    """Finds the single circle closest to a target diameter and the image center"""

    def __init__(self, config: Union[SearchConfig, Dict[str, Any]],
                 detector: Optional[CircleDetector] = None,
                 events: Optional[SearchEvents] = None):
        """
        Initialize the finder

        Args:
            config: SearchConfig or a dict accepted by SearchConfig.from_dict
            detector: Circle detector adapter (defaults to HoughCircleDetector)
            events: Notification channels; a fresh, unsubscribed set if omitted
        """
        if isinstance(config, dict):
            config = SearchConfig.from_dict(config)
        self.config = config.validate()
        self.detector = detector or HoughCircleDetector()
        self.events = events or SearchEvents()
        self.artifacts = ArtifactWriter(self.events)
        self.metrics = PerformanceMetrics()

    def find(self, image_input: Union[str, Path, np.ndarray],
             output_path: Optional[Union[str, Path]] = None,
             cancel_event: Optional[threading.Event] = None) -> SearchResult:
        """
        Run the full grid search

        Args:
            image_input: Path to image file or numpy array
            output_path: Where to save the annotated best circle (optional)
            cancel_event: Set it from another thread to stop scheduling new cells

        Returns:
            SearchResult; its best field is None when nothing qualified
        """
        config = self.config

        if isinstance(image_input, np.ndarray):
            image = image_input
        else:
            image = load_image(image_input)

        image_center, _ = image_geometry(image)
        workers = config.resolve_workers()
        size_weight, center_weight = config.normalized_weights()

        log_dir = None
        if output_path and config.saves_intermediate:
            log_dir = search_log_dir(output_path)
            log_dir.mkdir(parents=True, exist_ok=True)

        grid = grid_from_config(config)
        total = len(grid)

        self._report_start(total, workers, size_weight, center_weight)

        self.metrics.start_timer('search')
        evaluator = ParallelEvaluator(self.detector, config, self.events)
        outcome = evaluator.run(image, grid, cancel_event)
        best = select_best(outcome.results)
        elapsed = self.metrics.stop_timer('search')

        result = SearchResult(
            best=best,
            combinations_tested=outcome.processed,
            circles_found=outcome.circles_found,
            total_combinations=total,
            cancelled=outcome.cancelled,
            elapsed_ms=elapsed,
        )
        logger.debug(f"Search over {total} combinations took {elapsed:.0f}ms")

        if outcome.cancelled:
            self.events.emit_status(
                f"Search cancelled after {outcome.processed} of {total} combinations", True)

        if log_dir is not None:
            ranked = rank_candidates(outcome.export_candidates, config.max_intermediate_saved)
            saved = self.artifacts.export_candidates(image, ranked, image_center, log_dir)
            self.events.emit_status(
                f"Saved {len(saved)} intermediate results out of "
                f"{len(outcome.export_candidates)} candidates")

        if best is not None and output_path:
            self._report_best(result)
            if log_dir is not None:
                self.artifacts.write_summary(log_dir, config, result, workers)
            self.artifacts.save_best(image, best, image_center, output_path)
        elif best is None:
            self.events.emit_status("Parameter search completed. No circles found matching the criteria.")
            self.events.emit_status(f"Tested {result.combinations_tested} parameter combinations")

        self.events.emit_completed(
            result.circle,
            result.parameters_dict(config.target_diameter, size_weight, center_weight),
            result.result_info(config.target_diameter),
        )
        return result

    def _report_start(self, total: int, workers: int, size_weight: float, center_weight: float):
        config = self.config
        emit = self.events.emit_status
        emit(f"Starting parallel parameter search with {total} combinations...")
        emit(f"Canny range: {config.canny_start}-{config.canny_end}, step {config.canny_step}")
        emit(f"Accumulator range: {config.accum_start}-{config.accum_end}, step {config.accum_step}")
        emit(f"Target diameter: {config.target_diameter} px")
        emit(f"Using {workers} threads")
        emit(f"Weighting: Size={size_weight * 100:.0f}%, Center Proximity={center_weight * 100:.0f}%")

        if config.saves_intermediate:
            emit(f"Saving up to {config.max_intermediate_saved} intermediate results")
        else:
            emit("Not saving intermediate results (final result only)")

    def _report_best(self, result: SearchResult):
        best = result.best
        circle = best.circle
        target = self.config.target_diameter
        emit = self.events.emit_status
        emit("Parameter search completed!")
        emit(f"Tested {result.combinations_tested} parameter combinations")
        emit(f"Found {result.circles_found} circles in total")
        emit(f"Best parameters: Canny={best.canny_threshold}, Accum={best.accumulator_threshold}")
        emit(f"Best circle: Center=({circle.x:.1f}, {circle.y:.1f}), "
             f"Diameter={circle.diameter:.1f}px (Target: {target}px)")
        emit(f"Diameter difference: {best.size_difference:.1f}px "
             f"({best.size_difference / target * 100:.1f}% of target)")
        emit(f"Distance from image center: {best.center_distance:.1f}px")
        emit(f"Combined score: {best.score:.4f} (lower is better)")


def find_single_circle(image_path: Union[str, Path], target_diameter: float,
                       output_path: Optional[Union[str, Path]] = None,
                       detector: Optional[CircleDetector] = None,
                       events: Optional[SearchEvents] = None,
                       **options) -> Optional[DetectedCircle]:
    """
    One-call search returning only the best circle.

    Extra keyword options are SearchConfig fields, e.g. canny_step=4.
    """
    config = SearchConfig(target_diameter=target_diameter, **options)
    finder = CircleFinder(config, detector=detector, events=events)
    return finder.find(image_path, output_path).circle
