"""Reduction of per-cell results to a global best."""

from typing import Iterable, List, Optional

from circlefinder.search.models import ScoredCandidate


def select_best(results: Iterable[ScoredCandidate]) -> Optional[ScoredCandidate]:
    """
    Minimum-score entry of a finished result collection.

    Exact ties keep the entry that comes first in iteration order.
    Returns None for an empty collection.
    """
    best = None
    for result in results:
        if best is None or result.score < best.score:
            best = result
    return best


def rank_candidates(results: Iterable[ScoredCandidate], limit: Optional[int] = None) -> List[ScoredCandidate]:
    """Results sorted by ascending score, optionally capped at limit."""
    ranked = sorted(results, key=lambda r: r.score)
    if limit is not None:
        ranked = ranked[:max(limit, 0)]
    return ranked
