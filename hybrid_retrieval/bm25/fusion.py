"""
RRF (Reciprocal Rank Fusion) for combining multiple rankings.

RRF is a simple and effective method for combining results from multiple ranking systems.
It doesn't require normalization of scores and is robust to outliers, which is
why BM25 (unbounded, corpus-dependent) and cosine similarity (bounded [-1, 1])
can be fused without rescaling.

Formula:
    RRF(item, k=60) = Σ 1/(k + rank_i(item))

Where:
    k = constant (default: 60, from literature)
    rank_i = rank of item in i-th ranking (1-based)

Tie-break: items with equal RRF scores keep the order in which their id was
first seen (first ranking first, top to bottom). RRF itself does not define
a tie-break.

Reference: https://plg.uwaterloo.ca/~gvcormac/cormacksigir09-rrf.pdf
"""

from typing import Dict, List, Sequence

from ..models import FusedItem, RankedItem


def reciprocal_rank_fusion(
    rankings: Sequence[Sequence[RankedItem]],
    k: int = 60,
) -> List[FusedItem]:
    """
    Combine multiple rankings using Reciprocal Rank Fusion.

    Args:
        rankings: List of ranked result lists, best first
            Items are joined across lists by their `id` only

        k: RRF constant (default: 60)
            Standard value from literature
            Prevents divide-by-zero and controls fusion behavior

    Returns:
        Fused items sorted by RRF score (descending), ties in first-seen order

    Example:
        >>> bm25 = [RankedItem("A", 1, 3.2, doc_a), RankedItem("B", 2, 1.1, doc_b)]
        >>> vector = [RankedItem("B", 1, 0.9, doc_b), RankedItem("C", 2, 0.4, doc_c)]
        >>> [item.id for item in reciprocal_rank_fusion([bm25, vector])]
        ['B', 'A', 'C']  # B appears in both, ranked higher
    """
    if not rankings:
        return []

    # dict preserves insertion order, which gives the first-seen tie-break
    fused: Dict[str, FusedItem] = {}

    for ranking in rankings:
        for position, item in enumerate(ranking):
            contribution = 1.0 / (k + position + 1)
            existing = fused.get(item.id)
            if existing is None:
                fused[item.id] = FusedItem(id=item.id, rrf_score=contribution, data=item.data)
            else:
                existing.rrf_score += contribution

    # sorted() is stable, so equal scores stay in insertion order
    return sorted(fused.values(), key=lambda item: item.rrf_score, reverse=True)
