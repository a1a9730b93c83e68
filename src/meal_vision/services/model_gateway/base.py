"""
Base classes for the model gateway.

Defines the abstract interface every vision-model provider implements and the
gateway error taxonomy. The hard timeout lives here so that every provider
gets identical cancellation semantics.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class GatewayError(Exception):
    """Error during the external model call."""

    def __init__(
        self,
        message: str,
        error_code: str = "PROVIDER_ERROR",
        provider: str = "unknown",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.provider = provider
        self.details = details or {}


class GatewayTimeoutError(GatewayError):
    """The external model call exceeded the wall-clock timeout."""

    def __init__(self, provider: str, timeout: float):
        super().__init__(
            message=f"Model call exceeded {timeout:g}s timeout",
            error_code="TIMEOUT",
            provider=provider,
            details={"timeout_seconds": timeout},
        )
        self.timeout = timeout


class MealAnalysisGateway(ABC):
    """
    Abstract base class for meal analysis model providers.

    Subclasses implement ``_complete``; callers use ``complete``, which
    enforces the timeout and normalizes failures. A single attempt is made
    per call; retry policy belongs to the caller.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        ...

    @abstractmethod
    async def _complete(
        self,
        image_base64: str,
        mime_type: str,
        context: str | None = None,
    ) -> str | None:
        """
        Issue the provider-specific multimodal request.

        Returns:
            Raw completion text (may be empty or None)
        """
        ...

    async def complete(
        self,
        image_base64: str,
        mime_type: str,
        context: str | None = None,
    ) -> str:
        """
        Request a meal analysis from the model.

        Args:
            image_base64: Base64 image without data URL prefix
            mime_type: Image MIME type
            context: Optional free-text context from the user

        Returns:
            Raw textual completion

        Raises:
            GatewayTimeoutError: If the call exceeds the timeout
            GatewayError: On any other provider failure or empty completion
        """
        start_time = time.perf_counter()
        logger.info(
            f"Sending meal analysis request to {self.provider_name}",
            extra={"provider": self.provider_name, "has_context": bool(context)},
        )

        deadline = asyncio.timeout(self.timeout)
        try:
            # Cancels the in-flight call on expiry; a late result is dropped
            async with deadline:
                content = await self._complete(image_base64, mime_type, context)
        except TimeoutError as e:
            if not deadline.expired():
                # Raised by the provider itself, not our deadline
                logger.exception(f"{self.provider_name} request failed")
                raise GatewayError(
                    message=f"Model request failed: {e}",
                    error_code="PROVIDER_ERROR",
                    provider=self.provider_name,
                ) from e
            logger.error(f"{self.provider_name} timed out after {self.timeout}s")
            raise GatewayTimeoutError(self.provider_name, self.timeout) from e
        except GatewayError:
            raise
        except Exception as e:
            logger.exception(f"{self.provider_name} request failed")
            raise GatewayError(
                message=f"Model request failed: {e}",
                error_code="PROVIDER_ERROR",
                provider=self.provider_name,
            ) from e

        processing_time = int((time.perf_counter() - start_time) * 1000)

        if not content or not content.strip():
            logger.error(f"{self.provider_name} returned no content")
            raise GatewayError(
                message="No content in model response",
                error_code="EMPTY_RESPONSE",
                provider=self.provider_name,
            )

        logger.info(
            f"Meal analysis completion received in {processing_time}ms",
            extra={
                "provider": self.provider_name,
                "processing_time_ms": processing_time,
                "response_chars": len(content),
            },
        )
        return content

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is available and configured.

        Returns:
            True if the provider is ready to accept requests
        """
        ...

    async def close(self) -> None:
        """Release provider resources."""
        return None
