"""
Embedding ingestion: chunks → vectors → document store.

Chunks are sent to the provider in batches (provider limit, 10 by default).
Results are joined back to their chunks by the explicit index each result
carries, never by position. If a whole batch fails, every chunk of that batch
is retried on its own so one bad chunk does not sink its neighbours.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .embeddings import BaseEmbeddingProvider, EmbeddingResult

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 50


@dataclass
class IndexingReport:
    """Outcome of one index_chunks() call"""
    saved_ids: List[str] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)
    total_chunks: int = 0
    model: str = ""
    dimension: Optional[int] = None

    @property
    def saved_count(self) -> int:
        return len(self.saved_ids)

    @property
    def success(self) -> bool:
        return self.saved_count > 0


def _preview(chunk: str) -> str:
    return chunk[:PREVIEW_CHARS] + "..."


class EmbeddingIndexer:
    """Embed text chunks and persist them"""

    def __init__(self, provider: BaseEmbeddingProvider, store, batch_size: Optional[int] = None):
        """
        Args:
            provider: Embedding provider
            store: Object with async save_embeddings(records) -> List[str]
            batch_size: Texts per provider call (default: provider.max_batch_size)
        """
        self.provider = provider
        self.store = store
        self.batch_size = batch_size or provider.max_batch_size

    async def index_chunks(
        self,
        chunks: Sequence[str],
        model: str,
        dimension: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> IndexingReport:
        """
        Embed chunks and save every successful one.

        Raises:
            ValueError: If chunks is empty
            DocumentStoreError: If saving fails
        """
        if not chunks:
            raise ValueError("No chunks provided for embedding")

        report = IndexingReport(total_chunks=len(chunks), model=model)
        records: List[Dict[str, Any]] = []

        for start in range(0, len(chunks), self.batch_size):
            batch = list(chunks[start:start + self.batch_size])
            batch_records = await self._embed_batch(batch, model, dimension, metadata, report)
            records.extend(batch_records)

        logger.info(
            f"Embedded {len(records)}/{len(chunks)} chunks "
            f"({len(report.errors)} errors, model={model})"
        )

        if not records:
            return report

        report.dimension = records[0]["dimension"]
        report.saved_ids = await self.store.save_embeddings(records)
        return report

    async def _embed_batch(
        self,
        batch: List[str],
        model: str,
        dimension: Optional[int],
        metadata: Optional[Dict[str, Any]],
        report: IndexingReport,
    ) -> List[Dict[str, Any]]:
        try:
            results = await self.provider.embed(batch, model=model, dimension=dimension)
        except Exception as e:
            logger.warning(f"Batch of {len(batch)} failed ({e}), retrying chunks individually")
            return await self._embed_individually(batch, model, dimension, metadata, report)

        by_index: Dict[int, EmbeddingResult] = {}
        for result in sorted(results, key=lambda r: r.index):
            by_index.setdefault(result.index, result)

        records = []
        for position, chunk in enumerate(batch):
            result = by_index.get(position)
            if result is None or not result.vector:
                report.errors.append({
                    "chunk": _preview(chunk),
                    "error": "No embedding returned for this chunk",
                })
                continue
            records.append(_make_record(chunk, result, model, metadata))

        return records

    async def _embed_individually(
        self,
        batch: List[str],
        model: str,
        dimension: Optional[int],
        metadata: Optional[Dict[str, Any]],
        report: IndexingReport,
    ) -> List[Dict[str, Any]]:
        records = []

        for chunk in batch:
            try:
                results = await self.provider.embed([chunk], model=model, dimension=dimension)
            except Exception as e:
                logger.warning(f"Chunk failed after batch fallback: {e}")
                report.errors.append({"chunk": _preview(chunk), "error": str(e) or "Unknown error"})
                continue

            result = next((r for r in results if r.index == 0 and r.vector), None)
            if result is None:
                report.errors.append({
                    "chunk": _preview(chunk),
                    "error": "No embedding returned for this chunk",
                })
                continue
            records.append(_make_record(chunk, result, model, metadata))

        return records


def _make_record(
    chunk: str,
    result: EmbeddingResult,
    model: str,
    metadata: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    return {
        "text": chunk,
        "vector": result.vector,
        "model": model,
        "dimension": result.dimension,
        "metadata": metadata,
    }
