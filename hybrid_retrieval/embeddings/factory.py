"""
Factory to create embedding provider instances based on configuration.
"""

import logging

from ..config import Settings
from ..exceptions import ConfigurationError
from .base import BaseEmbeddingProvider
from .dashscope import DashScopeEmbeddingProvider

logger = logging.getLogger(__name__)


def create_embedding_provider(settings: Settings) -> BaseEmbeddingProvider:
    """
    Create the embedding provider named by settings.embedding_provider.
    
    Supported types:
        - dashscope: Alibaba Cloud DashScope HTTP API (requires DASHSCOPE_API_KEY)
        - genai: Google Gen AI SDK on Vertex AI (requires GCP_PROJECT_ID)
    
    Raises:
        ConfigurationError: Unknown provider or missing credentials
    """
    provider_type = settings.embedding_provider
    
    if provider_type == "dashscope":
        if not settings.dashscope_api_key:
            raise ConfigurationError("DASHSCOPE_API_KEY environment variable is not set")
        logger.info(f"Creating DashScope embedding provider (model={settings.embedding_model})")
        return DashScopeEmbeddingProvider(
            api_key=settings.dashscope_api_key,
            base_url=settings.dashscope_base_url,
            timeout=settings.embedding_timeout,
        )
    
    if provider_type == "genai":
        if not settings.gcp_project_id:
            raise ConfigurationError("GCP_PROJECT_ID environment variable is required for genai provider")
        # Lazy import: google-genai client setup is only needed for this provider
        from .genai import GenAIEmbeddingProvider
        logger.info(f"Creating Gen AI embedding provider (model={settings.embedding_model})")
        return GenAIEmbeddingProvider(
            project_id=settings.gcp_project_id,
            location=settings.gcp_location,
        )
    
    raise ConfigurationError(
        f"Unknown embedding provider: {provider_type}. "
        f"Valid options: dashscope, genai"
    )
