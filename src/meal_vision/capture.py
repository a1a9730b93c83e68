"""
Capture surface.

Turns a photo (file, bytes or camera frame) into the request triple consumed
by the analyze endpoint. Capture errors are user-facing strings and never
reach the server.
"""

import logging
import os
from dataclasses import dataclass, replace

from PIL import Image

from meal_vision.services.image_normalizer import (
    DEFAULT_MAX_HEIGHT,
    DEFAULT_MAX_WIDTH,
    DEFAULT_QUALITY,
    CompressedImage,
    ImageNormalizationError,
    ImageSource,
    normalize_image,
)

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp", ".heic", ".heif", ".tif", ".tiff"}

UNSUPPORTED_FILE_MESSAGE = "Please select an image file"
PROCESSING_FAILED_MESSAGE = "Failed to process image. Please try again."
NO_IMAGE_MESSAGE = "No image captured"


class CaptureError(Exception):
    """Capture-level failure with a message safe to show the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class CapturedImage:
    """A compressed image plus optional user context."""

    image: CompressedImage
    context: str | None = None

    @property
    def mime_type(self) -> str:
        return self.image.mime_type

    def with_context(self, context: str | None) -> "CapturedImage":
        """Same image, new context (for refine)."""
        return replace(self, context=context)

    def to_request(self, context: str | None = None) -> dict:
        """
        Build the analyze request body.

        Args:
            context: Overrides the stored context when given
        """
        body = {"image": self.image.base64, "mimeType": self.image.mime_type}
        effective = context if context is not None else self.context
        if effective and effective.strip():
            body["context"] = effective.strip()
        return body


def capture_image(
    source: ImageSource | None,
    *,
    context: str | None = None,
    max_width: int = DEFAULT_MAX_WIDTH,
    max_height: int = DEFAULT_MAX_HEIGHT,
    quality: float = DEFAULT_QUALITY,
) -> CapturedImage:
    """
    Capture and compress an image for analysis.

    Args:
        source: File path, encoded bytes, file object or camera frame
        context: Optional free text about the meal
        max_width: Maximum width in pixels
        max_height: Maximum height in pixels
        quality: JPEG quality in (0, 1]

    Returns:
        CapturedImage ready to send

    Raises:
        CaptureError: With a user-facing message
    """
    if source is None:
        raise CaptureError(NO_IMAGE_MESSAGE)

    if isinstance(source, (str, os.PathLike)):
        ext = os.path.splitext(os.fspath(source))[1].lower()
        if ext not in IMAGE_EXTENSIONS:
            raise CaptureError(UNSUPPORTED_FILE_MESSAGE)

    if isinstance(source, Image.Image) and (source.width == 0 or source.height == 0):
        raise CaptureError(NO_IMAGE_MESSAGE)

    try:
        compressed = normalize_image(
            source, max_width=max_width, max_height=max_height, quality=quality
        )
    except ImageNormalizationError as e:
        logger.warning(f"Capture failed ({e.source_type}): {e.message}")
        raise CaptureError(PROCESSING_FAILED_MESSAGE) from e

    logger.info(
        f"Captured image {compressed.width}x{compressed.height}, "
        f"{compressed.original_size} -> {compressed.compressed_size} bytes"
    )
    return CapturedImage(image=compressed, context=context)
