"""Tests for the parallel evaluator."""

import threading

import numpy as np
import pytest
from circlefinder.config import SearchConfig
from circlefinder.detection.base import DetectedCircle
from circlefinder.reporting.events import SearchEvents
from circlefinder.search.evaluator import (GOOD_MATCH_SCORE, PROGRESS_INTERVAL, ParallelEvaluator,
                                           min_separation, radius_bounds)
from circlefinder.search.grid import ParameterCombination, build_grid

from tests.stubs import FailingDetector, MutatingDetector, StubDetector


def small_config(**overrides):
    options = dict(target_diameter=60, canny_start=90, canny_end=110, canny_step=10,
                   accum_start=40, accum_end=60, accum_step=10, max_workers=4)
    options.update(overrides)
    return SearchConfig(**options).validate()


def collect(events):
    progress, status = [], []
    events.subscribe_progress(progress.append)
    events.subscribe_status(status.append)
    return progress, status


class TestPolicyConstants:
    """Test the radius window and separation derived from the target."""

    def test_radius_bounds(self):
        """Test +/-30% around the target radius, truncated to ints."""
        assert radius_bounds(60) == (21, 39)
        assert radius_bounds(100) == (35, 65)

    def test_radius_bounds_never_zero(self):
        """Test tiny targets still give a positive minimum radius."""
        assert radius_bounds(2)[0] >= 1

    def test_min_separation(self):
        """Test separation is half the target diameter."""
        assert min_separation(60) == 30

    def test_good_match_cutoff(self):
        """Test the export cutoff."""
        assert GOOD_MATCH_SCORE == 0.15
        assert PROGRESS_INTERVAL == 100


class TestParallelEvaluator:
    """Test per-combination evaluation and aggregation."""

    def test_detector_arguments(self, blank_image):
        """Test the detector receives the derived bounds and each threshold pair."""
        detector = StubDetector()
        config = small_config()
        ParallelEvaluator(detector, config).run(blank_image, build_grid(90, 110, 10, 40, 60, 10))

        assert len(detector.calls) == 9
        pairs = {(c['canny_threshold'], c['accumulator_threshold']) for c in detector.calls}
        assert pairs == {(c, a) for c in (90, 100, 110) for a in (40, 50, 60)}
        for call in detector.calls:
            assert (call['min_radius'], call['max_radius']) == (21, 39)
            assert call['min_separation'] == 30

    def test_each_task_gets_a_copy(self, blank_image):
        """Test no task ever sees or mutates the shared source image."""
        detector = MutatingDetector()
        ParallelEvaluator(detector, small_config()).run(blank_image, build_grid(90, 110, 10, 40, 60, 10))

        assert not blank_image.any()
        ids = {id(call['image']) for call in detector.calls}
        assert id(blank_image) not in ids

    def test_publishes_qualifying_candidates(self, blank_image, centered_circle):
        """Test one circle for one pair gives one result."""
        detector = StubDetector({(100, 50): [centered_circle]})
        outcome = ParallelEvaluator(detector, small_config()).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10))

        assert outcome.processed == 9
        assert outcome.total == 9
        assert outcome.circles_found == 1
        assert len(outcome.results) == 1
        assert outcome.results[0].parameters == ParameterCombination(100, 50)
        assert outcome.results[0].score == 0.0
        assert not outcome.cancelled

    def test_keeps_best_circle_per_combination(self, blank_image):
        """Test only the best-scoring circle of a detector call is kept."""
        off = DetectedCircle(20, 20, 30)
        good = DetectedCircle(50, 50, 30)
        detector = StubDetector(default=[off, good])
        outcome = ParallelEvaluator(detector, small_config()).run(
            blank_image, [ParameterCombination(100, 50)])

        assert len(outcome.results) == 1
        assert outcome.results[0].circle == good

    def test_tolerance_filters(self, blank_image):
        """Test candidates outside the diameter tolerance are discarded."""
        detector = StubDetector({
            (90, 40): [DetectedCircle(50, 50, 35)],   # diameter 70, off by 10
            (100, 50): [DetectedCircle(50, 50, 31)],  # diameter 62, off by 2
        })
        outcome = ParallelEvaluator(detector, small_config(diameter_tolerance=4)).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10))

        assert outcome.circles_found == 1
        assert all(r.size_difference <= 4 for r in outcome.results)

    def test_zero_tolerance_keeps_everything(self, blank_image):
        """Test tolerance 0 disables filtering."""
        detector = StubDetector(default=[DetectedCircle(50, 50, 39)])
        outcome = ParallelEvaluator(detector, small_config(diameter_tolerance=0)).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10))
        assert outcome.circles_found == 9

    def test_empty_detector(self, blank_image):
        """Test a detector that never finds anything gives no results."""
        outcome = ParallelEvaluator(StubDetector(), small_config()).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10))
        assert outcome.results == []
        assert outcome.processed == 9
        assert outcome.circles_found == 0

    def test_empty_grid(self, blank_image):
        """Test an empty grid runs and returns nothing."""
        outcome = ParallelEvaluator(StubDetector(), small_config()).run(blank_image, [])
        assert outcome.processed == 0
        assert outcome.results == []

    def test_failures_are_isolated(self, blank_image, centered_circle):
        """Test one exploding combination only costs its own result."""
        events = SearchEvents()
        _, status = collect(events)
        detector = FailingDetector({(90, 40)}, default=[centered_circle])
        outcome = ParallelEvaluator(detector, small_config(), events).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10))

        assert outcome.processed == 9
        assert outcome.failures == 1
        assert outcome.circles_found == 8
        warnings = [s for s in status if s.is_warning_or_error]
        assert len(warnings) == 1
        assert "C90 A40" in warnings[0].message

    def test_progress_intervals(self, blank_image):
        """Test progress fires every PROGRESS_INTERVAL completions and at the end."""
        events = SearchEvents()
        progress, _ = collect(events)
        grid = build_grid(1, 25, 1, 1, 10, 1)
        ParallelEvaluator(StubDetector(), small_config(), events).run(blank_image, grid)

        assert [p.current for p in progress] == [100, 200, 250]
        assert all(p.total == 250 for p in progress)
        assert progress[-1].percent_complete == 100.0

    def test_no_subscribers(self, blank_image, centered_circle):
        """Test the evaluator runs the same without any listener."""
        detector = StubDetector({(100, 50): [centered_circle]})
        outcome = ParallelEvaluator(detector, small_config(), events=None).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10))
        assert outcome.circles_found == 1

    def test_cancelled_before_start(self, blank_image):
        """Test a set cancel event skips every combination."""
        cancel = threading.Event()
        cancel.set()
        detector = StubDetector()
        outcome = ParallelEvaluator(detector, small_config()).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10), cancel)

        assert outcome.cancelled
        assert outcome.skipped == 9
        assert outcome.processed == 0
        assert detector.calls == []

    def test_cancel_mid_search(self, blank_image):
        """Test cancelling from a detector call stops later combinations."""
        cancel = threading.Event()

        class CancellingDetector(StubDetector):
            def detect(self, *args, **kwargs):
                cancel.set()
                return super().detect(*args, **kwargs)

        outcome = ParallelEvaluator(CancellingDetector(), small_config(max_workers=1)).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10), cancel)

        assert outcome.cancelled
        assert outcome.processed == 1
        assert outcome.skipped == 8

    @pytest.mark.parametrize("save_results,save_during,expected", [
        (True, True, 1), (True, False, 0), (False, True, 0),
    ])
    def test_export_candidates(self, blank_image, save_results, save_during, expected):
        """Test good matches are kept for export only when both flags are on."""
        detector = StubDetector({
            (100, 50): [DetectedCircle(50, 50, 30)],  # score 0
            (90, 40): [DetectedCircle(5, 5, 39)],     # poor match
        })
        config = small_config(save_intermediate_results=save_results,
                              save_during_iteration=save_during)
        outcome = ParallelEvaluator(detector, config).run(
            blank_image, build_grid(90, 110, 10, 40, 60, 10))

        assert outcome.circles_found == 2
        assert len(outcome.export_candidates) == expected
        assert all(c.score < GOOD_MATCH_SCORE for c in outcome.export_candidates)

    def test_thread_safety_under_load(self):
        """Test counters stay exact with many workers and many cells."""
        image = np.zeros((100, 100, 3), dtype=np.uint8)
        detector = StubDetector(default=[DetectedCircle(50, 50, 30)])
        grid = build_grid(1, 40, 1, 1, 25, 1)
        outcome = ParallelEvaluator(detector, small_config(max_workers=16)).run(image, grid)

        assert outcome.processed == 1000
        assert outcome.circles_found == 1000
        assert len(outcome.results) == 1000
