"""
Ranking of aggregated endpoint statistics.

Unavailable endpoints always sort after every available one; available
endpoints sort by ascending mean latency, ties keeping registry order.
"""

from typing import Optional, Sequence

from .models import EndpointStats


def _sort_key(stats: EndpointStats) -> tuple:
    # UNAVAILABLE never reaches a numeric comparison
    if not stats.is_available:
        return (1, 0.0, stats.order)
    return (0, stats.avg_latency, stats.order)


def rank(stats: Sequence[EndpointStats]) -> list[EndpointStats]:
    """
    Sort endpoint statistics from best to worst.

    Every entry is kept; failed endpoints end up at the tail, in
    registry order. The sort is stable, so entries with the same mean
    and order stay in input order.

    Args:
        stats: EndpointStats in any order

    Returns:
        New list, fastest available endpoint first
    """
    return sorted(stats, key=_sort_key)


def top_k(ranked: Sequence[EndpointStats], k: int) -> list[EndpointStats]:
    """
    Select the recommended subset of a ranking.

    Entries without a single successful sample are removed before
    slicing, so an unavailable endpoint is never recommended.

    Args:
        ranked: Output of :func:`rank`
        k: Maximum number of entries to return

    Returns:
        Up to ``k`` available entries, fastest first; empty if none

    Raises:
        ValueError: If ``k`` is negative
    """
    if k < 0:
        raise ValueError(f"k must be >= 0, got {k}")

    available = [s for s in rank(ranked) if s.success_count > 0]
    return available[:k]


def best(stats: Sequence[EndpointStats]) -> Optional[EndpointStats]:
    """Fastest available endpoint, or None if nothing responded."""
    winners = top_k(stats, 1)
    return winners[0] if winners else None
