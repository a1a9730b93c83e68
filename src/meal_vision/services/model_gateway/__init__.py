"""
Model Gateway - facade over external vision-language model providers.

Issues one schema-constrained multimodal call per analyze request and
normalizes timeouts and provider failures into GatewayTimeoutError and
GatewayError.
"""

from .base import (
    DEFAULT_TIMEOUT_SECONDS,
    GatewayError,
    GatewayTimeoutError,
    MealAnalysisGateway,
)
from .factory import clear_gateway_cache, get_model_gateway
from .langchain_provider import LangChainMealGateway, build_messages, get_llm
from .ollama_provider import OllamaMealGateway

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "GatewayError",
    "GatewayTimeoutError",
    "MealAnalysisGateway",
    "LangChainMealGateway",
    "OllamaMealGateway",
    "build_messages",
    "clear_gateway_cache",
    "get_llm",
    "get_model_gateway",
]
