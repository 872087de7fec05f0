"""
Document store on PostgreSQL + pgvector

Stores embedded text fragments and hands the full candidate set to the ranking
core. No vector index is used: hybrid search ranks the whole set in memory.
The vector column is unconstrained so several embedding models (and
dimensions) can share one table.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import asyncpg
from pgvector.asyncpg import register_vector

from .exceptions import DocumentStoreError
from .models import Document

logger = logging.getLogger(__name__)


class VectorDB:
    """PostgreSQL + pgvector document store"""

    def __init__(self, connection_string: str):
        self.pool: Optional[asyncpg.Pool] = None
        self.connection_string = connection_string

    async def connect(self):
        """Initialize connection pool"""
        async def init_connection(conn):
            """Register vector type for each new connection in the pool"""
            await register_vector(conn)

        try:
            # Extension must exist before register_vector can find the type
            conn = await asyncpg.connect(self.connection_string)
            try:
                await conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
            finally:
                await conn.close()

            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=1,
                max_size=10,
                init=init_connection,  # Register vector type for EVERY connection
            )
        except (OSError, asyncpg.PostgresError) as e:
            raise DocumentStoreError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e

        logger.info(f"Connected to PostgreSQL: {self.connection_string.split('@')[-1]}")

    async def disconnect(self):
        """Close connection pool"""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Disconnected from PostgreSQL")

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise DocumentStoreError("Database not connected")
        return self.pool

    async def init_schema(self):
        """Create tables and indexes"""
        async with self._require_pool().acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS embeddings (
                    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                    text TEXT NOT NULL,
                    vector VECTOR NOT NULL,
                    model TEXT NOT NULL,
                    dimension INTEGER NOT NULL,
                    metadata JSONB,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # B-tree index for the per-model filter used by every search
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_embeddings_model
                ON embeddings (model)
            """)

            logger.info("Database schema initialized (embeddings table)")

    async def get_all_embeddings(self, model: Optional[str] = None) -> List[Document]:
        """
        Fetch the full corpus, optionally restricted to one embedding model

        Args:
            model: Embedding model name filter (None = all models)

        Returns:
            Documents ordered by creation time
        """
        query = "SELECT id, text, vector, model, metadata FROM embeddings"
        params: List[Any] = []
        if model:
            query += " WHERE model = $1"
            params.append(model)
        query += " ORDER BY created_at, id"

        try:
            async with self._require_pool().acquire() as conn:
                rows = await conn.fetch(query, *params)
        except asyncpg.PostgresError as e:
            raise DocumentStoreError(f"Failed to load embeddings: {e}", cause=e) from e

        logger.debug(f"Loaded {len(rows)} embeddings (model={model})")
        return [_row_to_document(row) for row in rows]

    async def save_embeddings(self, records: Sequence[Dict[str, Any]]) -> List[str]:
        """
        Insert embedded fragments in one transaction

        Args:
            records: Dicts with keys text, vector, model, dimension, metadata

        Returns:
            Persisted ids, in input order
        """
        if not records:
            return []

        ids: List[str] = []
        try:
            async with self._require_pool().acquire() as conn:
                async with conn.transaction():
                    for record in records:
                        metadata = record.get("metadata")
                        row = await conn.fetchrow(
                            """
                            INSERT INTO embeddings (text, vector, model, dimension, metadata)
                            VALUES ($1, $2, $3, $4, $5)
                            RETURNING id
                            """,
                            record["text"],
                            list(record["vector"]),
                            record["model"],
                            int(record.get("dimension") or len(record["vector"])),
                            json.dumps(metadata) if metadata is not None else None,
                        )
                        ids.append(str(row["id"]))
        except asyncpg.PostgresError as e:
            raise DocumentStoreError(f"Failed to save embeddings: {e}", cause=e) from e

        logger.info(f"Saved {len(ids)} embeddings")
        return ids

    async def count_embeddings(self, model: Optional[str] = None) -> int:
        """Get stored embedding count"""
        async with self._require_pool().acquire() as conn:
            if model:
                return await conn.fetchval("SELECT COUNT(*) FROM embeddings WHERE model = $1", model)
            return await conn.fetchval("SELECT COUNT(*) FROM embeddings")


def _row_to_document(row) -> Document:
    metadata = row["metadata"]
    if isinstance(metadata, str):
        metadata = json.loads(metadata)

    vector = row["vector"]
    # pgvector returns numpy arrays
    vector = vector.tolist() if hasattr(vector, "tolist") else list(vector)

    return Document(
        id=str(row["id"]),
        text=row["text"],
        vector=[float(v) for v in vector],
        model=row["model"],
        metadata=metadata,
    )
