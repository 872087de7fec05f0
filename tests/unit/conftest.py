"""Unit test configuration - deterministic fakes for isolated testing

No network, no database: the embedding provider and document store are
replaced by in-memory fakes (see tests/fakes.py) that implement the same interfaces.
"""

from typing import List

import pytest

from fakes import FakeEmbeddingProvider, InMemoryStore, make_document
from hybrid_retrieval.models import Document


@pytest.fixture
def pets_corpus() -> List[Document]:
    """Three short documents with 2-d vectors"""
    return [
        make_document("doc-cat", "the cat sat", [1.0, 0.0], metadata={"source": "a"}),
        make_document("doc-dog", "the dog ran", [0.0, 1.0], metadata={"source": "b"}),
        make_document("doc-both", "cats and dogs", [0.7, 0.7]),
    ]


@pytest.fixture
def fake_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider(default=[1.0, 0.0])


@pytest.fixture
def store(pets_corpus) -> InMemoryStore:
    return InMemoryStore(pets_corpus)
