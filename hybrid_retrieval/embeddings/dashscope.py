"""
Alibaba Cloud DashScope embedding provider (text-embedding-v4 and friends).

Plain HTTPS API, called with httpx. Up to 10 texts per request.
"""

import logging
from typing import List, Optional

import httpx

from ..exceptions import EmbeddingProviderError
from .base import BaseEmbeddingProvider, EmbeddingResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = (
    "https://dashscope.aliyuncs.com/api/v1/services/embeddings/text-embedding/text-embedding"
)


class DashScopeEmbeddingProvider(BaseEmbeddingProvider):
    """
    DashScope text-embedding API.
    
    Response shape:
        {"output": {"embeddings": [{"index": 0, "embedding": [...]}, ...]}}
    """
    
    max_batch_size = 10
    
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            api_key: DashScope API key (Bearer token)
            base_url: Embedding endpoint URL
            timeout: Per-request timeout in seconds
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        logger.info(f"DashScopeEmbeddingProvider initialized: {base_url}")
    
    async def embed(
        self,
        texts: List[str],
        model: str,
        dimension: Optional[int] = None,
    ) -> List[EmbeddingResult]:
        payload = {
            "model": model,
            "input": {"texts": texts},
        }
        if dimension:
            payload["dimension"] = dimension
        
        logger.debug(f"DashScope embed: {len(texts)} texts, model={model}, dimension={dimension}")
        
        try:
            response = await self._client.post(
                self.base_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"DashScope request failed: {e}")
            raise EmbeddingProviderError(f"DashScope request failed: {e}", cause=e) from e
        
        if response.status_code >= 400:
            raise EmbeddingProviderError(
                f"DashScope API error: {response.status_code} {response.reason_phrase} - {response.text}"
            )
        
        try:
            data = response.json()
        except ValueError as e:
            raise EmbeddingProviderError("Invalid response from DashScope API", cause=e) from e
        
        embeddings = (data.get("output") or {}).get("embeddings") or []
        if not embeddings:
            raise EmbeddingProviderError("Invalid response from DashScope API")
        
        return [
            EmbeddingResult(
                index=item.get("index", 0),
                vector=[float(v) for v in item.get("embedding") or []],
            )
            for item in embeddings
        ]
    
    def get_model_info(self) -> dict:
        return {
            "name": "dashscope",
            "type": "http_api",
            "provider": "alibaba-cloud",
            "base_url": self.base_url,
        }
    
    async def close(self):
        await self._client.aclose()
