"""Structural and size validation for analyze requests.

Runs before any external call. Both checks are local and pure.
"""

import logging
from typing import Any

from pydantic import ValidationError

from meal_vision.core.exceptions import ImageTooLargeError, InvalidRequestError
from meal_vision.models.nutrition import AnalyzeRequest

logger = logging.getLogger(__name__)

# =============================================================================
# Validation Constants
# =============================================================================

MAX_IMAGE_SIZE = 4 * 1024 * 1024  # 4 MiB decoded

DATA_URL_PREFIX = "data:"


def parse_analyze_request(body: Any) -> AnalyzeRequest:
    """
    Validate the shape of a raw analyze request body.

    Args:
        body: Decoded JSON body

    Returns:
        Validated AnalyzeRequest

    Raises:
        InvalidRequestError: If the body is not an object, the image is
            missing/empty, the mime type is not allowed or the context is
            too long
    """
    if not isinstance(body, dict):
        raise InvalidRequestError(details={"reason": "body must be a JSON object"})

    try:
        request = AnalyzeRequest.model_validate(body)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        logger.warning(f"Analyze request failed validation: {fields}")
        raise InvalidRequestError(details={"fields": fields}) from e

    # Whitespace or a bare data URL prefix leaves no payload
    if not strip_data_url_prefix(request.image):
        logger.warning("Analyze request failed validation: ['image']")
        raise InvalidRequestError(details={"fields": ["image"]})

    return request


def strip_data_url_prefix(image: str) -> str:
    """Remove a ``data:<mime>;base64,`` prefix if present."""
    data = image.strip()
    if data.startswith(DATA_URL_PREFIX) and "," in data:
        return data.split(",", 1)[1].strip()
    return data


def decoded_size(image: str) -> int:
    """
    Compute the decoded byte length of a base64 payload.

    The binary is never materialized: every 4 characters encode 3 bytes,
    minus one byte per trailing padding character.
    """
    data = strip_data_url_prefix(image)
    padding = len(data) - len(data.rstrip("="))
    return max(0, (len(data) * 3) // 4 - padding)


def validate_image_size(image: str, max_bytes: int = MAX_IMAGE_SIZE) -> int:
    """
    Reject images whose decoded size exceeds ``max_bytes``.

    Returns:
        Decoded size in bytes

    Raises:
        ImageTooLargeError: If the image is too large
    """
    size = decoded_size(image)
    if size > max_bytes:
        logger.warning(f"Image too large: {size} bytes (max {max_bytes})")
        raise ImageTooLargeError(size_bytes=size, max_bytes=max_bytes)
    return size
