"""Tests for result reduction."""

from circlefinder.detection.base import DetectedCircle
from circlefinder.search.grid import ParameterCombination
from circlefinder.search.models import ScoredCandidate
from circlefinder.search.reducer import rank_candidates, select_best


def make_candidate(score, canny=100, accum=50):
    return ScoredCandidate(
        circle=DetectedCircle(50, 50, 30),
        parameters=ParameterCombination(canny, accum),
        size_difference=0.0,
        center_distance=0.0,
        score=score,
    )


class TestSelectBest:
    """Test the global best selection."""

    def test_empty(self):
        """Test an empty result set means no match."""
        assert select_best([]) is None

    def test_single(self):
        """Test a single result is the best."""
        candidate = make_candidate(0.3)
        assert select_best([candidate]) is candidate

    def test_lower_score_wins_either_order(self):
        """Test the 0.05 candidate wins regardless of order."""
        a = make_candidate(0.10, 90, 40)
        b = make_candidate(0.05, 110, 60)
        assert select_best([a, b]) is b
        assert select_best([b, a]) is b

    def test_ties_are_consistent(self):
        """Test exact ties keep the first entry."""
        a = make_candidate(0.2, 1, 1)
        b = make_candidate(0.2, 2, 2)
        assert select_best([a, b]) is a
        assert select_best([a, b]) is a

    def test_accepts_iterators(self):
        """Test any iterable works."""
        candidates = [make_candidate(s) for s in (0.4, 0.1, 0.3)]
        assert select_best(iter(candidates)).score == 0.1


class TestRankCandidates:
    """Test ordering for artifact export."""

    def test_sorted_ascending(self):
        """Test candidates come back best first."""
        ranked = rank_candidates([make_candidate(s) for s in (0.12, 0.01, 0.07)])
        assert [c.score for c in ranked] == [0.01, 0.07, 0.12]

    def test_capped(self):
        """Test the limit caps the list."""
        ranked = rank_candidates([make_candidate(s) for s in (0.12, 0.01, 0.07)], limit=2)
        assert [c.score for c in ranked] == [0.01, 0.07]

    def test_zero_limit(self):
        """Test a zero limit gives nothing."""
        assert rank_candidates([make_candidate(0.1)], limit=0) == []
