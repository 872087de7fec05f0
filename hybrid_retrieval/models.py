"""
Data model shared by the ranking core, the document store and the HTTP layer.

All of these live only for the duration of one search call, except Document,
which is owned by the document store.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Document:
    """Embedded text fragment as returned by the document store"""
    id: str
    text: str
    vector: List[float]
    model: str
    metadata: Optional[Dict[str, Any]] = None

    @property
    def dimension(self) -> int:
        return len(self.vector)


@dataclass
class RankedItem:
    """One entry of a single scorer's ranking"""
    id: str
    rank: int        # 1-based position in its ranking
    score: float     # Weighted score (diagnostic only, RRF ignores it)
    data: Document


@dataclass
class FusedItem:
    """One entry of the fused ranking"""
    id: str
    rrf_score: float
    data: Document


@dataclass
class SearchDiagnostics:
    """Candidate counts considered by each method"""
    bm25_candidates: int = 0
    vector_candidates: int = 0
    fused_total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "bm25_candidates": self.bm25_candidates,
            "vector_candidates": self.vector_candidates,
            "fused_total": self.fused_total,
        }


@dataclass
class SearchResultRow:
    """Final result row returned to callers"""
    rank: int
    id: str
    text: str
    rrf_score: float
    metadata: Optional[Dict[str, Any]]
    model: str
    dimension: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "id": self.id,
            "text": self.text,
            "rrf_score": self.rrf_score,
            "metadata": self.metadata,
            "model": self.model,
            "dimension": self.dimension,
        }


@dataclass
class HybridSearchResult:
    """Outcome of one hybrid search (empty results = NoResults)"""
    query: str
    results: List[SearchResultRow] = field(default_factory=list)
    diagnostics: SearchDiagnostics = field(default_factory=SearchDiagnostics)

    @property
    def no_results(self) -> bool:
        return not self.results
