"""
LangChain chat-model provider for meal analysis.

Supports OpenAI and Google Gemini vision models through their LangChain
integrations.
"""

import logging
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.runnables import Runnable

from meal_vision.core.config import LLMProvider, Settings, get_settings
from meal_vision.services.prompts import (
    MEAL_ANALYSIS_JSON_SCHEMA,
    MEAL_ANALYSIS_SCHEMA_NAME,
    NUTRITION_SYSTEM_PROMPT,
    build_user_prompt,
)

from .base import DEFAULT_TIMEOUT_SECONDS, MealAnalysisGateway

logger = logging.getLogger(__name__)


def get_llm(settings: Settings | None = None) -> Runnable:
    """
    Get configured vision chat model based on settings.

    Args:
        settings: Application settings (uses default if not provided)

    Returns:
        Chat model constrained to JSON output

    Raises:
        ValueError: If provider is not configured or unsupported
    """
    if settings is None:
        settings = get_settings()

    match settings.llm_provider:
        case LLMProvider.GEMINI:
            return _get_gemini(settings)
        case LLMProvider.OPENAI:
            return _get_openai(settings)
        case _:
            raise ValueError(
                f"Unsupported LangChain provider: {settings.llm_provider}"
            )


def _get_openai(settings: Settings) -> Runnable:
    """Get OpenAI chat model with strict JSON-schema output."""
    from langchain_openai import ChatOpenAI

    if not settings.openai_api_key:
        raise ValueError(
            "OpenAI API key not configured. "
            "Set OPENAI_API_KEY in your .env file."
        )

    llm = ChatOpenAI(
        model=settings.openai_model,
        api_key=settings.openai_api_key,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        max_retries=0,  # Single attempt; the orchestrator owns retry policy
    )
    return llm.bind(
        response_format={
            "type": "json_schema",
            "json_schema": {
                "name": MEAL_ANALYSIS_SCHEMA_NAME,
                "strict": True,
                "schema": MEAL_ANALYSIS_JSON_SCHEMA,
            },
        }
    )


def _get_gemini(settings: Settings) -> BaseChatModel:
    """Get Google Gemini chat model with JSON output."""
    from langchain_google_genai import ChatGoogleGenerativeAI

    if not settings.google_api_key:
        raise ValueError(
            "Google API key not configured. "
            "Set GOOGLE_API_KEY in your .env file."
        )

    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.google_api_key,
        temperature=settings.llm_temperature,
        max_output_tokens=settings.llm_max_tokens,
        max_retries=0,
        response_mime_type="application/json",
    )


def build_messages(
    image_base64: str, mime_type: str, context: str | None = None
) -> list:
    """Build the system + multimodal user turn."""
    return [
        SystemMessage(content=NUTRITION_SYSTEM_PROMPT),
        HumanMessage(
            content=[
                {"type": "text", "text": build_user_prompt(context)},
                {
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{mime_type};base64,{image_base64}",
                        "detail": "high",
                    },
                },
            ]
        ),
    ]


def _message_text(content: Any) -> str | None:
    """Flatten LangChain message content into text."""
    if content is None or isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LangChainMealGateway(MealAnalysisGateway):
    """Meal analysis through a LangChain chat model."""

    def __init__(
        self,
        llm: Runnable,
        model_name: str,
        provider: str = "openai",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize LangChain provider.

        Args:
            llm: Chat model (already bound to structured output)
            model_name: Model identifier, for logging and health info
            provider: Provider family (openai or gemini)
            timeout: Hard timeout in seconds
        """
        super().__init__(timeout=timeout)
        self.llm = llm
        self.model_name = model_name
        self.provider = provider

    @classmethod
    def from_settings(cls, settings: Settings) -> "LangChainMealGateway":
        return cls(
            llm=get_llm(settings),
            model_name=settings.llm_model,
            provider=settings.llm_provider.value,
            timeout=settings.analysis_timeout_seconds,
        )

    @property
    def provider_name(self) -> str:
        return f"{self.provider}/{self.model_name}"

    async def _complete(
        self,
        image_base64: str,
        mime_type: str,
        context: str | None = None,
    ) -> str | None:
        messages = build_messages(image_base64, mime_type, context)
        response = await self.llm.ainvoke(messages)
        return _message_text(response.content)

    async def health_check(self) -> bool:
        """LangChain providers are healthy once constructed with credentials."""
        return self.llm is not None
