"""
BM25 (Best Match 25) keyword relevance for hybrid search.

Full BM25 with corpus-wide IDF, recomputed from the candidate set on every
search call. No index is persisted between calls, so there is nothing to
invalidate when documents are added or removed.

Components:
- tokenizer: Unicode-aware word splitting
- scorer: BM25 scoring with per-query corpus statistics
- fusion: RRF (Reciprocal Rank Fusion) for combining rankings
"""

from .tokenizer import tokenize
from .scorer import BM25Scorer, BM25Score, CorpusStatistics, calculate_bm25
from .fusion import reciprocal_rank_fusion

__all__ = [
    "tokenize",
    "BM25Scorer",
    "BM25Score",
    "CorpusStatistics",
    "calculate_bm25",
    "reciprocal_rank_fusion",
]
