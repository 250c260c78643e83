"""Performance tests."""

import time

import numpy as np
import cv2
from circlefinder.config import SearchConfig
from circlefinder.detection.base import DetectedCircle
from circlefinder.detection.circle_detector import HoughCircleDetector
from circlefinder.search.evaluator import ParallelEvaluator
from circlefinder.search.grid import build_grid
from circlefinder.utils.metrics import PerformanceMetrics

from tests.stubs import StubDetector


class TestPerformance:
    """Test performance benchmarks."""

    def test_hough_detection_speed(self):
        """Test one Hough call on a large image."""
        detector = HoughCircleDetector()
        test_image = np.zeros((1080, 1920, 3), dtype=np.uint8)
        cv2.circle(test_image, (960, 540), 150, (255, 255, 255), -1)

        start = time.time()
        detector.detect(test_image, 105, 195, 100, 50, 150)
        duration = (time.time() - start) * 1000

        assert duration < 2000

    def test_grid_overhead(self):
        """Test scheduling the full default grid with an instant detector."""
        config = SearchConfig(target_diameter=60, max_workers=4).validate()
        grid = build_grid(10, 200, 2, 10, 100, 2)
        image = np.zeros((100, 100, 3), dtype=np.uint8)
        detector = StubDetector(default=[DetectedCircle(50, 50, 30)])

        start = time.time()
        outcome = ParallelEvaluator(detector, config).run(image, grid)
        duration = (time.time() - start) * 1000

        assert outcome.processed == 96 * 46
        assert duration < 10000

    def test_performance_metrics(self):
        """Test performance metrics tracking."""
        metrics = PerformanceMetrics()

        metrics.start_timer('test_operation')
        time.sleep(0.1)
        duration = metrics.stop_timer('test_operation')

        assert 90 < duration < 300
        assert 'test_operation' not in metrics.start_times

    def test_stop_unknown_timer(self):
        """Test stopping a timer that was never started."""
        metrics = PerformanceMetrics()
        assert metrics.stop_timer('missing') == 0.0
