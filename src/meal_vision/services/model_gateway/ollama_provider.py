"""
Ollama provider for meal analysis.

Uses a local Ollama instance with a vision model (e.g. LLaVA). The strict
output schema is passed through Ollama's ``format`` field.
"""

import logging

import httpx

from meal_vision.services.prompts import (
    MEAL_ANALYSIS_JSON_SCHEMA,
    NUTRITION_SYSTEM_PROMPT,
    build_user_prompt,
)

from .base import DEFAULT_TIMEOUT_SECONDS, GatewayError, MealAnalysisGateway

logger = logging.getLogger(__name__)


class OllamaMealGateway(MealAnalysisGateway):
    """
    Meal analysis using Ollama's chat API.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llava:7b",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ):
        """
        Initialize Ollama provider.

        Args:
            base_url: Ollama API base URL
            model: Vision model to use (default: llava:7b)
            timeout: Hard timeout in seconds
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
        """
        super().__init__(timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: httpx.AsyncClient | None = None

    @property
    def provider_name(self) -> str:
        return f"ollama/{self.model}"

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            # Transport timeout is a backstop; complete() enforces the real one
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout + 5.0),
            )
        return self._client

    def build_request(
        self, image_base64: str, context: str | None = None
    ) -> dict:
        """Build the /api/chat request body."""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": NUTRITION_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": build_user_prompt(context),
                    "images": [image_base64],
                },
            ],
            "format": MEAL_ANALYSIS_JSON_SCHEMA,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }

    async def _complete(
        self,
        image_base64: str,
        mime_type: str,
        context: str | None = None,
    ) -> str | None:
        client = self._get_client()
        try:
            response = await client.post(
                "/api/chat", json=self.build_request(image_base64, context)
            )
        except httpx.RequestError as e:
            raise GatewayError(
                message=f"Failed to connect to Ollama: {e}",
                error_code="CONNECTION_ERROR",
                provider=self.provider_name,
            ) from e

        if response.status_code != 200:
            raise GatewayError(
                message=f"Ollama API error: {response.status_code}",
                error_code="PROVIDER_ERROR",
                provider=self.provider_name,
                details={"status_code": response.status_code},
            )

        data = response.json()
        return (data.get("message") or {}).get("content")

    async def health_check(self) -> bool:
        """Check if Ollama is available and has the required model."""
        try:
            response = await self._get_client().get("/api/tags")
            if response.status_code != 200:
                return False

            models = [m.get("name", "") for m in response.json().get("models", [])]
            model_available = any(
                self.model in m or m.startswith(self.model.split(":")[0])
                for m in models
            )
            if not model_available:
                logger.warning(f"Model {self.model} not found. Available: {models}")
            return model_available

        except httpx.HTTPError as e:
            logger.error(f"Ollama health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
