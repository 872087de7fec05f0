"""
Google Gen AI embedding provider (Vertex AI text-embedding models).

The SDK call is blocking, so it runs in a worker thread to keep the event
loop free.
"""

import asyncio
import logging
from typing import List, Optional

from google import genai
from google.genai.types import EmbedContentConfig

from ..exceptions import EmbeddingProviderError
from .base import BaseEmbeddingProvider, EmbeddingResult

logger = logging.getLogger(__name__)


class GenAIEmbeddingProvider(BaseEmbeddingProvider):
    """Embeddings via google-genai (Vertex AI backend)"""
    
    max_batch_size = 10
    
    def __init__(
        self,
        project_id: Optional[str] = None,
        location: str = "us-central1",
        client: Optional[genai.Client] = None,
    ):
        """
        Args:
            project_id: GCP project (required unless client is given)
            location: Vertex AI region
            client: Pre-built genai client
        """
        self.project_id = project_id
        self.location = location
        if client is None:
            logger.info(f"Initializing Google Gen AI (project={project_id}, location={location})...")
            client = genai.Client(vertexai=True, project=project_id, location=location)
        self.client = client
    
    async def embed(
        self,
        texts: List[str],
        model: str,
        dimension: Optional[int] = None,
    ) -> List[EmbeddingResult]:
        config = EmbedContentConfig(output_dimensionality=dimension) if dimension else None
        
        def _call():
            return self.client.models.embed_content(
                model=model,
                contents=texts,
                config=config,
            )
        
        try:
            response = await asyncio.to_thread(_call)
        except Exception as e:
            logger.error(f"Gen AI embedding failed ({model}): {e}")
            raise EmbeddingProviderError(f"Gen AI embedding failed: {e}", cause=e) from e
        
        embeddings = getattr(response, "embeddings", None) or []
        if not embeddings:
            raise EmbeddingProviderError("Gen AI returned no embeddings")
        
        # SDK returns embeddings in request order
        return [
            EmbeddingResult(index=i, vector=list(embedding.values or []))
            for i, embedding in enumerate(embeddings)
        ]
    
    def get_model_info(self) -> dict:
        return {
            "name": "genai",
            "type": "sdk",
            "provider": "google-genai",
            "project_id": self.project_id,
            "location": self.location,
        }
