"""
Hybrid search: BM25 keyword relevance + vector similarity, fused with RRF.

Pipeline:
1. Validate query and corpus
2. Start query embedding (the only await point)
3. BM25 over all document texts → top 2×top_k with score > 0
4. Cosine similarity over documents of matching dimension → top 2×top_k
5. RRF fusion of the non-empty rankings → top_k

The candidate window (2×top_k per method) lets a document ranked just outside
top_k by one method still reach the final top_k through the other.

If the query cannot be embedded the whole search fails. There is no
BM25-only fallback: callers are told why instead of receiving lexical-only
results without explanation.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from .bm25 import BM25Scorer, reciprocal_rank_fusion
from .embeddings import BaseEmbeddingProvider, embed_query
from .exceptions import (
    EmbeddingUnavailableError,
    EmptyCorpusError,
    HybridRetrievalError,
    InvalidQueryError,
)
from .models import (
    Document,
    HybridSearchResult,
    RankedItem,
    SearchDiagnostics,
    SearchResultRow,
)
from .similarity import score_documents

logger = logging.getLogger(__name__)

QueryEmbedder = Callable[[str], Awaitable[Optional[Sequence[float]]]]


def _bm25_ranking(
    documents: Sequence[Document],
    query: str,
    window: int,
    weight: float,
    scorer: BM25Scorer,
) -> List[RankedItem]:
    scores = scorer.score([doc.text for doc in documents], query)
    matched = sorted(
        (s for s in scores if s.score > 0),
        key=lambda s: s.score,
        reverse=True,
    )[:window]

    return [
        RankedItem(
            id=documents[s.index].id,
            rank=position + 1,
            score=s.score * weight,
            data=documents[s.index],
        )
        for position, s in enumerate(matched)
    ]


def _vector_ranking(
    documents: Sequence[Document],
    query_vector: Sequence[float],
    window: int,
    weight: float,
) -> List[RankedItem]:
    scored = sorted(
        score_documents(query_vector, documents),
        key=lambda pair: pair[1],
        reverse=True,
    )[:window]

    return [
        RankedItem(
            id=document.id,
            rank=position + 1,
            score=similarity * weight,
            data=document,
        )
        for position, (document, similarity) in enumerate(scored)
    ]


async def _resolve_query_vector(embed: QueryEmbedder, query: str) -> List[float]:
    try:
        vector = await embed(query)
    except EmbeddingUnavailableError:
        raise
    except Exception as e:
        raise EmbeddingUnavailableError(
            f"Failed to generate embedding for query: {e}", cause=e
        ) from e

    # numpy arrays have no truth value
    if vector is None or len(vector) == 0:
        raise EmbeddingUnavailableError("Failed to generate embedding for query")
    return list(vector)


async def hybrid_search(
    query: str,
    documents: Sequence[Document],
    embed: QueryEmbedder,
    top_k: int = 10,
    bm25_weight: float = 1.0,
    vector_weight: float = 1.0,
    rrf_k: int = 60,
    scorer: Optional[BM25Scorer] = None,
) -> HybridSearchResult:
    """
    Rank documents against a query with BM25 + cosine similarity + RRF.

    Args:
        query: Raw query text
        documents: Full candidate set (already loaded from the store)
        embed: Async callable returning the query vector
        top_k: Number of fused results to return
        bm25_weight: Multiplier on BM25 scores (diagnostic only, RRF is rank-based)
        vector_weight: Multiplier on cosine scores (diagnostic only)
        rrf_k: RRF constant
        scorer: BM25 scorer (default: k1=1.5, b=0.75)

    Returns:
        HybridSearchResult; empty results means neither method matched anything

    Raises:
        InvalidQueryError: Query is empty or whitespace only
        EmptyCorpusError: No documents to search
        EmbeddingUnavailableError: Query could not be embedded
    """
    if not query or not query.strip():
        raise InvalidQueryError("Query cannot be empty")

    if not documents:
        raise EmptyCorpusError("No embeddings found in database. Please create embeddings first.")

    if top_k < 1:
        raise InvalidQueryError(f"top_k must be at least 1, got {top_k}")

    scorer = scorer or BM25Scorer()
    window = top_k * 2

    # BM25 has no dependency on the query vector, so it runs while the
    # embedding request is in flight. Yield once so the task sends its
    # request before the synchronous scoring starts.
    embedding_task = asyncio.ensure_future(_resolve_query_vector(embed, query))
    await asyncio.sleep(0)
    try:
        bm25_ranked = _bm25_ranking(documents, query, window, bm25_weight, scorer)
    except BaseException:
        embedding_task.cancel()
        raise

    query_vector = await embedding_task
    vector_ranked = _vector_ranking(documents, query_vector, window, vector_weight)

    logger.debug(
        f"Candidates: bm25={len(bm25_ranked)}, vector={len(vector_ranked)} "
        f"(window={window}, corpus={len(documents)})"
    )

    rankings = [ranking for ranking in (bm25_ranked, vector_ranked) if ranking]
    diagnostics = SearchDiagnostics(
        bm25_candidates=len(bm25_ranked),
        vector_candidates=len(vector_ranked),
    )

    if not rankings:
        logger.info(f"No results for query: {query!r}")
        return HybridSearchResult(query=query, diagnostics=diagnostics)

    fused = reciprocal_rank_fusion(rankings, k=rrf_k)
    diagnostics.fused_total = len(fused)

    results = [
        SearchResultRow(
            rank=position + 1,
            id=item.id,
            text=item.data.text,
            rrf_score=item.rrf_score,
            metadata=item.data.metadata,
            model=item.data.model,
            dimension=item.data.dimension,
        )
        for position, item in enumerate(fused[:top_k])
    ]

    logger.info(
        f"Hybrid search: {len(results)} results "
        f"(bm25={diagnostics.bm25_candidates}, vector={diagnostics.vector_candidates}, "
        f"fused={diagnostics.fused_total})"
    )

    return HybridSearchResult(query=query, results=results, diagnostics=diagnostics)


class HybridSearchService:
    """
    Wires the document store and embedding provider into hybrid_search and
    turns every outcome into a response dict for tool/API callers.

    The service never raises: failures come back as
    {"success": False, "error": <reason>, "results": []}.
    """

    def __init__(
        self,
        store,
        provider: BaseEmbeddingProvider,
        default_model: str = "text-embedding-v4",
        default_dimension: Optional[int] = None,
        rrf_k: int = 60,
        scorer: Optional[BM25Scorer] = None,
    ):
        """
        Args:
            store: Object with async get_all_embeddings(model=None) -> List[Document]
            provider: Embedding provider for query vectorization
            default_model: Model used when a request does not name one
            default_dimension: Query vector dimension used when a request does not name one
            rrf_k: RRF constant
            scorer: BM25 scorer (default parameters if None)
        """
        self.store = store
        self.provider = provider
        self.default_model = default_model
        self.default_dimension = default_dimension
        self.rrf_k = rrf_k
        self.scorer = scorer or BM25Scorer()

    async def search(
        self,
        query: str,
        top_k: int = 10,
        bm25_weight: float = 1.0,
        vector_weight: float = 1.0,
        model: Optional[str] = None,
        dimension: Optional[int] = None,
    ) -> Dict[str, Any]:
        model = model or self.default_model
        dimension = dimension or self.default_dimension

        try:
            if not query or not query.strip():
                raise InvalidQueryError("Query cannot be empty")

            documents = await self.store.get_all_embeddings(model=model)

            async def _embed(text: str) -> List[float]:
                return await embed_query(self.provider, text, model=model, dimension=dimension)

            outcome = await hybrid_search(
                query,
                documents,
                _embed,
                top_k=top_k,
                bm25_weight=bm25_weight,
                vector_weight=vector_weight,
                rrf_k=self.rrf_k,
                scorer=self.scorer,
            )
        except HybridRetrievalError as e:
            logger.warning(f"Hybrid search failed ({type(e).__name__}): {e.message}")
            return {"success": False, "error": e.message, "results": []}
        except Exception as e:
            logger.exception(f"Unexpected hybrid search failure: {e}")
            return {
                "success": False,
                "error": str(e) or "Failed to perform hybrid search. Please try again later.",
                "results": [],
            }

        if outcome.no_results:
            message = "No results found"
        else:
            message = f"Found {len(outcome.results)} result(s)"

        return {
            "success": True,
            "message": message,
            "query": query,
            "results": [row.to_dict() for row in outcome.results],
            "diagnostics": outcome.diagnostics.to_dict(),
        }
