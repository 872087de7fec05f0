"""
Hybrid lexical + semantic retrieval.

Ranks a corpus of embedded text fragments by BM25 and by cosine similarity,
then fuses both rankings with Reciprocal Rank Fusion.
"""

from .bm25 import BM25Scorer, calculate_bm25, reciprocal_rank_fusion, tokenize
from .models import Document, FusedItem, HybridSearchResult, RankedItem
from .search import HybridSearchService, hybrid_search
from .similarity import cosine_similarity

__version__ = "0.1.0"

__all__ = [
    "BM25Scorer",
    "calculate_bm25",
    "reciprocal_rank_fusion",
    "tokenize",
    "cosine_similarity",
    "hybrid_search",
    "HybridSearchService",
    "Document",
    "RankedItem",
    "FusedItem",
    "HybridSearchResult",
]
