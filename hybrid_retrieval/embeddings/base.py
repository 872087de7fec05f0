"""
Abstract base class for embedding providers.

All providers must implement this interface to be swappable.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..exceptions import EmbeddingUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingResult:
    """Single embedding returned by a provider"""
    index: int            # Position of the source text in the request batch
    vector: List[float]

    @property
    def dimension(self) -> int:
        return len(self.vector)


class BaseEmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.
    
    Providers may return results out of order, so every result carries the
    index of the text it was computed from.
    """
    
    max_batch_size: int = 10
    
    @abstractmethod
    async def embed(
        self,
        texts: List[str],
        model: str,
        dimension: Optional[int] = None,
    ) -> List[EmbeddingResult]:
        """
        Embed a batch of texts.
        
        Args:
            texts: Texts to embed (at most max_batch_size)
            model: Provider-specific model name
            dimension: Requested output dimension (provider default if None)
            
        Returns:
            List of EmbeddingResult, in no guaranteed order
            
        Raises:
            EmbeddingProviderError: If the whole batch failed
        """
        pass
    
    @abstractmethod
    def get_model_info(self) -> dict:
        """
        Get information about the provider.
        
        Returns:
            Dict with keys: name, type, provider
        """
        pass
    
    async def close(self):
        """Optional cleanup (close HTTP clients, etc.)"""
        pass


async def embed_query(
    provider: BaseEmbeddingProvider,
    query: str,
    model: str,
    dimension: Optional[int] = None,
) -> List[float]:
    """
    Embed a single query text.
    
    Raises:
        EmbeddingUnavailableError: If the provider failed or returned no vector
    """
    try:
        results = await provider.embed([query], model=model, dimension=dimension)
    except Exception as e:
        logger.error(f"Query embedding failed ({model}): {e}")
        raise EmbeddingUnavailableError(
            f"Failed to generate embedding for query: {e}", cause=e
        ) from e
    
    for result in results:
        if result.index == 0 and result.vector:
            return list(result.vector)
    
    raise EmbeddingUnavailableError("Failed to generate embedding for query: provider returned no vector")
