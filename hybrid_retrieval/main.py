"""
Hybrid Retrieval - FastAPI application for BM25 + vector search with RRF fusion

Endpoints:
- POST /v1/search      Hybrid search over stored embeddings
- POST /v1/embeddings  Embed text chunks and store them
- POST /v1/split       Split raw text into overlapping chunks
- GET  /health         Liveness + document store reachability

Every endpoint is a thin wrapper: ranking lives in hybrid_retrieval.search,
ingestion in hybrid_retrieval.indexer, chunking in hybrid_retrieval.text_splitter.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import Settings, load_settings
from .database import VectorDB
from .embeddings import BaseEmbeddingProvider, create_embedding_provider
from .exceptions import DocumentStoreError, HybridRetrievalError
from .indexer import EmbeddingIndexer
from .logging_config import setup_logging
from .bm25 import BM25Scorer
from .search import HybridSearchService
from .text_splitter import RecursiveCharacterTextSplitter

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"
APP_START_TIME = datetime.now(timezone.utc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources"""
    settings = load_settings()
    setup_logging(
        log_file=settings.log_file,
        console_level=settings.log_level,
        file_level=logging.DEBUG,  # Always DEBUG in file for troubleshooting
    )

    logger.info("Connecting to database...")
    store = VectorDB(settings.database_url)
    await store.connect()
    await store.init_schema()

    provider = create_embedding_provider(settings)

    app.state.settings = settings
    app.state.store = store
    app.state.provider = provider
    app.state.search_service = HybridSearchService(
        store=store,
        provider=provider,
        default_model=settings.embedding_model,
        default_dimension=settings.embedding_dimension,
        rrf_k=settings.rrf_k,
        scorer=BM25Scorer(k1=settings.bm25_k1, b=settings.bm25_b),
    )
    app.state.indexer = EmbeddingIndexer(
        provider=provider,
        store=store,
        batch_size=settings.embedding_batch_size,
    )
    logger.info(f"Hybrid retrieval ready (provider={provider.get_model_info()}, model={settings.embedding_model})")

    yield

    logger.info("Shutting down...")
    await provider.close()
    await store.disconnect()


app = FastAPI(
    title="Hybrid Retrieval API",
    description="BM25 + vector similarity search fused with Reciprocal Rank Fusion",
    version=APP_VERSION,
    lifespan=lifespan,
)


# Dependencies (overridden in tests)
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request):
    return request.app.state.store


def get_provider(request: Request) -> BaseEmbeddingProvider:
    return request.app.state.provider


def get_search_service(request: Request) -> HybridSearchService:
    return request.app.state.search_service


def get_indexer(request: Request) -> EmbeddingIndexer:
    return request.app.state.indexer


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    uptime_seconds: float
    store: str
    embedding: Dict[str, Any]


class SearchRequest(BaseModel):
    query: str = Field(..., description="Search query text")
    top_k: Optional[int] = Field(
        default=None,
        ge=1,
        le=100,
        description="Number of top results to return (server default if omitted)"
    )
    bm25_weight: float = Field(default=1.0, ge=0.0, description="Weight for BM25 results")
    vector_weight: float = Field(default=1.0, ge=0.0, description="Weight for vector similarity results")
    model: Optional[str] = Field(
        default=None,
        description="Embedding model for query vectorization (server default if omitted)"
    )
    dimension: Optional[int] = Field(
        default=None,
        ge=1,
        description="Vector dimension (model default if omitted)"
    )

    model_config = ConfigDict(
        protected_namespaces=(),
        json_schema_extra={
            "example": {
                "query": "reciprocal rank fusion",
                "top_k": 5,
                "bm25_weight": 1.0,
                "vector_weight": 1.0,
            }
        },
    )


class SearchResultItem(BaseModel):
    rank: int
    id: str
    text: str
    rrf_score: float
    metadata: Optional[Dict[str, Any]] = None
    model: str
    dimension: int

    model_config = ConfigDict(protected_namespaces=())


class SearchDiagnosticsModel(BaseModel):
    bm25_candidates: int
    vector_candidates: int
    fused_total: int


class SearchResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    query: Optional[str] = None
    results: List[SearchResultItem] = Field(default_factory=list)
    diagnostics: Optional[SearchDiagnosticsModel] = None


class EmbeddingsRequest(BaseModel):
    chunks: List[str] = Field(..., description="Text chunks to embed and store")
    model: Optional[str] = Field(default=None, description="Embedding model name")
    dimension: Optional[int] = Field(default=None, ge=1, description="Vector dimension")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Metadata stored with every chunk")

    model_config = ConfigDict(protected_namespaces=())


class ChunkError(BaseModel):
    chunk: str
    error: str


class EmbeddingsResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    saved_count: int = 0
    total_chunks: int = 0
    model: Optional[str] = None
    dimension: Optional[int] = None
    errors: Optional[List[ChunkError]] = None

    model_config = ConfigDict(protected_namespaces=())


class SplitRequest(BaseModel):
    text: str = Field(..., description="Text to split")
    chunk_size: int = Field(default=1000, ge=1, description="Maximum characters per chunk")
    chunk_overlap: int = Field(default=200, ge=0, description="Characters carried into the next chunk")


class SplitResponse(BaseModel):
    chunks: List[str]
    count: int


# Routes
@app.get("/health", response_model=HealthResponse)
async def health(
    store=Depends(get_store),
    provider: BaseEmbeddingProvider = Depends(get_provider),
):
    """Health check (reports whether the document store answers)"""
    try:
        await store.count_embeddings()
        store_status = "ok"
    except Exception as e:
        logger.warning(f"Health check: document store unavailable - {e}")
        store_status = "unavailable"

    now = datetime.now(timezone.utc)
    return HealthResponse(
        status="healthy" if store_status == "ok" else "degraded",
        version=APP_VERSION,
        started_at=APP_START_TIME.isoformat(),
        uptime_seconds=(now - APP_START_TIME).total_seconds(),
        store=store_status,
        embedding=provider.get_model_info(),
    )


@app.post("/v1/search", response_model=SearchResponse, response_model_exclude_none=True)
async def search(
    request: SearchRequest,
    service: HybridSearchService = Depends(get_search_service),
    settings: Settings = Depends(get_settings),
):
    """
    Hybrid search: BM25 + vector similarity, fused with RRF.

    Failures (empty query, empty corpus, embedding provider down) come back as
    `success: false` with a human-readable `error`, never as a partial,
    lexical-only answer. A search where neither method matched anything is a
    success with an empty result list.

    **Example:**
    ```json
    {"query": "rank fusion", "top_k": 5}
    ```
    """
    started = time.perf_counter()
    response = await service.search(
        query=request.query,
        top_k=request.top_k or settings.default_top_k,
        bm25_weight=request.bm25_weight,
        vector_weight=request.vector_weight,
        model=request.model,
        dimension=request.dimension or settings.embedding_dimension,
    )
    logger.debug(f"/v1/search took {(time.perf_counter() - started) * 1000:.1f}ms")
    return SearchResponse(**response)


@app.post("/v1/embeddings", response_model=EmbeddingsResponse, response_model_exclude_none=True)
async def create_embeddings(
    request: EmbeddingsRequest,
    indexer: EmbeddingIndexer = Depends(get_indexer),
    settings: Settings = Depends(get_settings),
):
    """
    Embed text chunks (10 per provider call) and store them.

    Chunks that fail are reported in `errors`; the rest are saved.
    """
    model = request.model or settings.embedding_model
    dimension = request.dimension or settings.embedding_dimension

    if not request.chunks:
        return EmbeddingsResponse(success=False, error="No chunks provided for embedding")

    try:
        report = await indexer.index_chunks(
            request.chunks,
            model=model,
            dimension=dimension,
            metadata=request.metadata,
        )
    except HybridRetrievalError as e:
        logger.error(f"Embedding ingestion failed: {e.message}")
        return EmbeddingsResponse(success=False, error=e.message, total_chunks=len(request.chunks))

    errors = [ChunkError(**err) for err in report.errors] or None

    if not report.success:
        return EmbeddingsResponse(
            success=False,
            error="Failed to generate any embeddings",
            total_chunks=report.total_chunks,
            errors=errors,
        )

    return EmbeddingsResponse(
        success=True,
        message=f"Successfully generated and saved {report.saved_count} embedding(s)",
        saved_count=report.saved_count,
        total_chunks=report.total_chunks,
        model=report.model,
        dimension=report.dimension,
        errors=errors,
    )


@app.post("/v1/split", response_model=SplitResponse)
async def split_text(request: SplitRequest):
    """Split text into overlapping chunks ready for /v1/embeddings"""
    try:
        splitter = RecursiveCharacterTextSplitter(
            chunk_size=request.chunk_size,
            chunk_overlap=request.chunk_overlap,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    chunks = splitter.split_text(request.text)
    return SplitResponse(chunks=chunks, count=len(chunks))


@app.exception_handler(DocumentStoreError)
async def store_exception_handler(request, exc: DocumentStoreError):
    """Document store failures (not caught by an endpoint)"""
    logger.error(f"Document store error: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Document store unavailable", "detail": exc.message},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.exception(f"Unhandled error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hybrid_retrieval.main:app",
        host="0.0.0.0",
        port=load_settings().port,
    )
