"""
Embedding providers for document ingestion and query vectorization.

Supports multiple backends:
- DashScope: Alibaba Cloud text-embedding HTTP API (default)
- Gen AI: Google Vertex AI embeddings via google-genai

Usage:
    from hybrid_retrieval.embeddings import create_embedding_provider, embed_query

    provider = create_embedding_provider(settings)
    vector = await embed_query(provider, "What is RRF?", model="text-embedding-v4")
"""

from .base import BaseEmbeddingProvider, EmbeddingResult, embed_query
from .dashscope import DashScopeEmbeddingProvider
from .factory import create_embedding_provider

__all__ = [
    "BaseEmbeddingProvider",
    "EmbeddingResult",
    "embed_query",
    "DashScopeEmbeddingProvider",
    "create_embedding_provider",
]
