"""Unit tests for the HTTP layer (FastAPI TestClient, dependencies overridden with fakes)"""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from fakes import FakeEmbeddingProvider
from hybrid_retrieval.config import Settings
from hybrid_retrieval.indexer import EmbeddingIndexer
from hybrid_retrieval.main import (
    app,
    get_indexer,
    get_provider,
    get_search_service,
    get_settings,
    get_store,
)
from hybrid_retrieval.search import HybridSearchService


@pytest.fixture
def client(store, fake_provider):
    """TestClient without lifespan (no database, no real provider)"""
    service = HybridSearchService(store=store, provider=fake_provider, default_model="test-model")
    indexer = EmbeddingIndexer(provider=fake_provider, store=store)
    
    app.dependency_overrides[get_settings] = lambda: Settings(embedding_model="test-model")
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_provider] = lambda: fake_provider
    app.dependency_overrides[get_search_service] = lambda: service
    app.dependency_overrides[get_indexer] = lambda: indexer
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSearchEndpoint:
    """Test POST /v1/search"""
    
    def test_search_success(self, client):
        response = client.post("/v1/search", json={"query": "cat", "top_k": 3})
        
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["query"] == "cat"
        assert data["results"][0]["id"] == "doc-cat"
        assert data["results"][0]["rank"] == 1
        assert data["results"][0]["metadata"] == {"source": "a"}
        assert data["diagnostics"]["bm25_candidates"] == 1
        assert data["message"] == f"Found {len(data['results'])} result(s)"
    
    def test_blank_query_is_failure_response(self, client):
        response = client.post("/v1/search", json={"query": "   "})
        
        assert response.status_code == 200
        assert response.json() == {"success": False, "error": "Query cannot be empty", "results": []}
    
    def test_embedding_failure_is_failure_response(self, store):
        service = HybridSearchService(
            store=store,
            provider=FakeEmbeddingProvider(failing={"cat"}),
            default_model="test-model",
        )
        app.dependency_overrides[get_search_service] = lambda: service
        app.dependency_overrides[get_settings] = lambda: Settings(embedding_model="test-model")
        try:
            response = TestClient(app).post("/v1/search", json={"query": "cat"})
        finally:
            app.dependency_overrides.clear()
        
        data = response.json()
        assert data["success"] is False
        assert data["error"].startswith("Failed to generate embedding for query")
        assert data["results"] == []
    
    def test_default_top_k_from_settings(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(embedding_model="test-model", default_top_k=1)
        
        data = client.post("/v1/search", json={"query": "cat"}).json()
        
        assert data["success"] is True
        assert [row["id"] for row in data["results"]] == ["doc-cat"]
    
    def test_configured_dimension_used_for_query(self, store):
        """Test EMBEDDING_DIMENSION reaches the provider when the request names none"""
        seen = []
        
        class RecordingProvider(FakeEmbeddingProvider):
            async def embed(self, texts, model, dimension=None):
                seen.append(dimension)
                return await super().embed(texts, model, dimension)
        
        service = HybridSearchService(
            store=store,
            provider=RecordingProvider(default=[1.0, 0.0]),
            default_model="test-model",
        )
        app.dependency_overrides[get_search_service] = lambda: service
        app.dependency_overrides[get_settings] = lambda: Settings(
            embedding_model="test-model", embedding_dimension=2
        )
        try:
            test_client = TestClient(app)
            test_client.post("/v1/search", json={"query": "cat"})
            test_client.post("/v1/search", json={"query": "cat", "dimension": 8})
        finally:
            app.dependency_overrides.clear()
        
        assert seen == [2, 8]
    
    @pytest.mark.parametrize("body", [
        {"query": "cat", "top_k": 0},
        {"query": "cat", "top_k": 101},
        {"query": "cat", "bm25_weight": -1},
        {"top_k": 5},
    ])
    def test_request_validation(self, client, body):
        assert client.post("/v1/search", json=body).status_code == 422


class TestEmbeddingsEndpoint:
    """Test POST /v1/embeddings"""
    
    def test_embeddings_saved(self, client, store):
        response = client.post("/v1/embeddings", json={
            "chunks": ["first chunk", "second chunk"],
            "metadata": {"source": "upload"},
        })
        
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Successfully generated and saved 2 embedding(s)"
        assert data["saved_count"] == 2
        assert data["model"] == "test-model"
        assert data["dimension"] == 2
        assert "errors" not in data
        assert [record["metadata"] for record in store.saved] == [{"source": "upload"}] * 2
    
    def test_empty_chunks(self, client):
        data = client.post("/v1/embeddings", json={"chunks": []}).json()
        
        assert data["success"] is False
        assert data["error"] == "No chunks provided for embedding"
    
    def test_all_chunks_failed(self, store):
        indexer = EmbeddingIndexer(provider=FakeEmbeddingProvider(failing={"bad"}), store=store)
        app.dependency_overrides[get_indexer] = lambda: indexer
        app.dependency_overrides[get_settings] = lambda: Settings(embedding_model="test-model")
        try:
            data = TestClient(app).post("/v1/embeddings", json={"chunks": ["bad"]}).json()
        finally:
            app.dependency_overrides.clear()
        
        assert data["success"] is False
        assert data["error"] == "Failed to generate any embeddings"
        assert data["errors"][0]["chunk"] == "bad..."


class TestSplitEndpoint:
    """Test POST /v1/split"""
    
    def test_split(self, client):
        response = client.post("/v1/split", json={
            "text": "one two three four five six seven eight nine ten",
            "chunk_size": 20,
            "chunk_overlap": 5,
        })
        
        assert response.status_code == 200
        assert response.json() == {
            "chunks": ["one two three four", "four five six seven", "seven eight nine ten"],
            "count": 3,
        }
    
    def test_overlap_not_smaller_than_size(self, client):
        response = client.post("/v1/split", json={"text": "abc", "chunk_size": 10, "chunk_overlap": 10})
        
        assert response.status_code == 400


class TestHealthEndpoint:
    """Test GET /health"""
    
    def test_healthy(self, client):
        data = client.get("/health").json()
        
        assert data["status"] == "healthy"
        assert data["store"] == "ok"
        assert data["version"] == "0.1.0"
        assert data["embedding"] == {"name": "fake", "type": "in_memory", "provider": "tests"}
    
    def test_degraded_when_store_fails(self):
        broken_store = Mock()
        broken_store.count_embeddings = AsyncMock(side_effect=ConnectionError("db down"))
        app.dependency_overrides[get_store] = lambda: broken_store
        app.dependency_overrides[get_provider] = lambda: FakeEmbeddingProvider()
        try:
            data = TestClient(app).get("/health").json()
        finally:
            app.dependency_overrides.clear()
        
        assert data["status"] == "degraded"
        assert data["store"] == "unavailable"
