"""Analyze orchestrator.

Sequences validation, the model gateway and reconciliation for a single
request, and maps every failure to a stable (status, code, message) triple.
Holds no cross-request state.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from meal_vision.core.config import Settings
from meal_vision.core.exceptions import (
    AIServiceError,
    APIError,
    InternalError,
    ModelTimeoutError,
    ParseError,
)
from meal_vision.models.nutrition import AnalyzeFailure, AnalyzeResponse, AnalyzeSuccess
from meal_vision.services.model_gateway import (
    GatewayError,
    GatewayTimeoutError,
    MealAnalysisGateway,
)
from meal_vision.services.reconciler import reconcile
from meal_vision.services.request_validator import (
    parse_analyze_request,
    strip_data_url_prefix,
    validate_image_size,
)

logger = logging.getLogger(__name__)

GatewayProvider = Callable[[], MealAnalysisGateway]


@dataclass(frozen=True)
class AnalyzeOutcome:
    """HTTP status plus response envelope."""

    status_code: int
    response: AnalyzeResponse

    def to_wire(self) -> dict:
        return self.response.to_wire()


class AnalyzeService:
    """
    Service for one-shot meal analysis.

    Each call is independent; the gateway is the only suspending stage.
    """

    def __init__(self, gateway: GatewayProvider, settings: Settings):
        """
        Initialize analyze service.

        Args:
            gateway: Zero-argument callable returning the model gateway,
                resolved only once the request has passed validation
            settings: Application settings (size limit)
        """
        self._gateway_provider = gateway
        self.settings = settings

    def _resolve_gateway(self) -> MealAnalysisGateway:
        try:
            return self._gateway_provider()
        except GatewayError as e:
            logger.error(
                f"Model gateway unavailable: {e.message}",
                extra={"provider": e.provider, "error_code": e.error_code},
            )
            raise AIServiceError(details={"error_code": e.error_code}) from e

    async def analyze(self, body: Any) -> AnalyzeOutcome:
        """
        Run the full pipeline on a raw request body.

        Never raises: every failure is rendered as a failure envelope.
        """
        try:
            analysis = await self._run(body)
        except APIError as e:
            return self._failure(e)
        except Exception:
            logger.exception("Unexpected error in analyze pipeline")
            return self._failure(InternalError())

        return AnalyzeOutcome(status_code=200, response=AnalyzeSuccess(data=analysis))

    async def _run(self, body: Any):
        start_time = time.perf_counter()

        # Step 1: structural validation
        request = parse_analyze_request(body)

        # Step 2: size validation
        image = strip_data_url_prefix(request.image)
        size = validate_image_size(image, self.settings.max_image_bytes)

        # Step 3: external model call
        gateway = self._resolve_gateway()
        try:
            raw = await gateway.complete(
                image_base64=image,
                mime_type=request.mime_type.value,
                context=request.context,
            )
        except GatewayTimeoutError as e:
            logger.error(f"Model call timed out: {e.message}")
            raise ModelTimeoutError() from e
        except GatewayError as e:
            logger.error(
                f"Model call failed: {e.message}",
                extra={"provider": e.provider, "error_code": e.error_code},
            )
            raise AIServiceError() from e

        # Step 4: reconciliation
        analysis = reconcile(raw)
        if analysis is None:
            raise ParseError()

        logger.info(
            "Meal analysis complete",
            extra={
                "image_bytes": size,
                "mime_type": request.mime_type.value,
                "has_context": request.context is not None,
                "food_items": len(analysis.food_items),
                "confidence": analysis.confidence.value,
                "processing_time_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return analysis

    @staticmethod
    def _failure(error: APIError) -> AnalyzeOutcome:
        logger.info(
            f"Analyze request failed: {error.code}",
            extra={"code": error.code, "status_code": error.status_code},
        )
        return AnalyzeOutcome(
            status_code=error.status_code,
            response=AnalyzeFailure(error=error.message, code=error.code),
        )
