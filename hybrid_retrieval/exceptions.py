"""
Exception hierarchy for hybrid retrieval.

Algorithmic conditions (dimension mismatch during ranking) are absorbed by the
orchestrator. Environmental conditions (embedding provider, document store)
propagate to the service layer, which turns them into failure responses.
"""

from typing import Optional


class HybridRetrievalError(Exception):
    """Base class for all errors raised by this package"""

    def __init__(self, message: str, *, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class InvalidQueryError(HybridRetrievalError):
    """Query is empty or whitespace only"""


class EmptyCorpusError(HybridRetrievalError):
    """No documents to search"""


class EmbeddingUnavailableError(HybridRetrievalError):
    """Query embedding could not be produced, so the vector leg cannot run"""


class DimensionMismatchError(HybridRetrievalError, ValueError):
    """Vectors of different lengths were compared"""


class EmbeddingProviderError(HybridRetrievalError):
    """Embedding provider call failed or returned a malformed response"""


class DocumentStoreError(HybridRetrievalError):
    """Document store could not be read or written"""


class ConfigurationError(HybridRetrievalError):
    """Missing or invalid configuration value"""
