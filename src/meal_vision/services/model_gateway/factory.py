"""
Factory for creating model gateway instances.

Reads configuration from settings and returns the appropriate provider.
"""

import logging
from functools import lru_cache

from meal_vision.core.config import LLMProvider, get_settings

from .base import GatewayError, MealAnalysisGateway
from .langchain_provider import LangChainMealGateway
from .ollama_provider import OllamaMealGateway

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_model_gateway() -> MealAnalysisGateway:
    """
    Get the configured model gateway.

    Configuration is read from settings:
    - LLM_PROVIDER: openai, gemini or ollama (default: openai)
    - ANALYSIS_TIMEOUT_SECONDS: hard timeout (default: 30)

    Returns:
        Configured MealAnalysisGateway instance

    Raises:
        GatewayError: If the provider is not configured
    """
    settings = get_settings()
    provider = settings.llm_provider

    logger.info(f"Initializing model gateway: {provider.value}")

    if provider == LLMProvider.OLLAMA:
        logger.info(
            f"Configuring Ollama provider: {settings.ollama_base_url}, "
            f"model={settings.ollama_model}"
        )
        return OllamaMealGateway(
            base_url=settings.ollama_base_url,
            model=settings.ollama_model,
            timeout=settings.analysis_timeout_seconds,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )

    try:
        return LangChainMealGateway.from_settings(settings)
    except ValueError as e:
        raise GatewayError(
            message=str(e),
            error_code="NOT_CONFIGURED",
            provider=provider.value,
        ) from e


def clear_gateway_cache():
    """Clear the cached gateway instance (useful for testing)."""
    get_model_gateway.cache_clear()
