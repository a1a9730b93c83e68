"""
Image normalization for the capture side of the pipeline.

Scales an arbitrary image source down to bounded dimensions and re-encodes it
as JPEG, keeping byte-size bookkeeping for observability.
"""

import base64
import io
import logging
import os
from typing import BinaryIO, Union

from PIL import Image, ImageOps, UnidentifiedImageError
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 1200
DEFAULT_MAX_HEIGHT = 1200
DEFAULT_QUALITY = 0.8

# Pillow's JPEG encoder degrades above 95
MAX_PIL_QUALITY = 95

ImageSource = Union[bytes, str, os.PathLike, BinaryIO, Image.Image]


class ImageNormalizationError(Exception):
    """The source could not be decoded or the result could not be encoded."""

    def __init__(self, message: str, source_type: str = "unknown"):
        super().__init__(message)
        self.message = message
        self.source_type = source_type


class CompressedImage(BaseModel):
    """Compressed JPEG payload with size bookkeeping."""

    base64: str = Field(..., description="Base64 JPEG without data URL prefix")
    mime_type: str = "image/jpeg"
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    original_size: int = Field(..., ge=0, description="Source size in bytes (estimated for frames)")
    compressed_size: int = Field(..., ge=0, description="Encoded JPEG size in bytes")

    @property
    def compression_ratio(self) -> float:
        """Compressed size as a fraction of the original."""
        if not self.original_size:
            return 1.0
        return self.compressed_size / self.original_size

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


def scale_dimensions(
    width: int, height: int, max_width: int, max_height: int
) -> tuple[int, int]:
    """
    Scale dimensions down to fit the bounds, preserving aspect ratio.

    Never upscales. Width is clamped first, then height.
    """
    new_width = float(width)
    new_height = float(height)

    if new_width > max_width:
        new_height = new_height * max_width / new_width
        new_width = max_width

    if new_height > max_height:
        new_width = new_width * max_height / new_height
        new_height = max_height

    return max(1, round(new_width)), max(1, round(new_height))


def normalize_image(
    source: ImageSource,
    *,
    max_width: int = DEFAULT_MAX_WIDTH,
    max_height: int = DEFAULT_MAX_HEIGHT,
    quality: float = DEFAULT_QUALITY,
) -> CompressedImage:
    """
    Compress an image source into a bounded-size JPEG.

    Args:
        source: Encoded bytes, a file path, a binary file object, or an
            in-memory Pillow image (e.g. a camera frame)
        max_width: Maximum output width in pixels
        max_height: Maximum output height in pixels
        quality: JPEG quality factor in (0, 1]

    Returns:
        CompressedImage with payload and sizes

    Raises:
        ValueError: If the constraints are invalid
        ImageNormalizationError: If decoding or encoding fails
    """
    if not 0 < quality <= 1:
        raise ValueError(f"quality must be in (0, 1], got {quality}")
    if max_width < 1 or max_height < 1:
        raise ValueError("max_width and max_height must be positive")

    if isinstance(source, Image.Image):
        # Frames have no encoded size; estimate as raw RGBA
        original_size = source.width * source.height * 4
        return _encode(source, original_size, max_width, max_height, quality)

    if isinstance(source, (str, os.PathLike)):
        try:
            original_size = os.path.getsize(source)
        except OSError as e:
            raise ImageNormalizationError(
                f"Failed to load image: {e}", source_type="file"
            ) from e
        return _load_and_encode(source, original_size, "file", max_width, max_height, quality)

    if isinstance(source, (bytes, bytearray)):
        return _load_and_encode(
            io.BytesIO(source), len(source), "bytes", max_width, max_height, quality
        )

    # File-like object
    data = source.read()
    return _load_and_encode(
        io.BytesIO(data), len(data), "stream", max_width, max_height, quality
    )


def _load_and_encode(
    fp,
    original_size: int,
    source_type: str,
    max_width: int,
    max_height: int,
    quality: float,
) -> CompressedImage:
    """Open an encoded source and re-encode it; the handle is always released."""
    try:
        with Image.open(fp) as img:
            img.load()
            return _encode(img, original_size, max_width, max_height, quality)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        logger.warning(f"Failed to decode {source_type} image: {e}")
        raise ImageNormalizationError(
            "Failed to load image", source_type=source_type
        ) from e


def _encode(
    img: Image.Image,
    original_size: int,
    max_width: int,
    max_height: int,
    quality: float,
) -> CompressedImage:
    """Orient, resize and encode as JPEG."""
    img = ImageOps.exif_transpose(img)
    if img.mode != "RGB":
        img = img.convert("RGB")

    width, height = scale_dimensions(img.width, img.height, max_width, max_height)
    if (width, height) != img.size:
        img = img.resize((width, height), Image.Resampling.LANCZOS)

    buf = io.BytesIO()
    try:
        img.save(
            buf,
            format="JPEG",
            quality=max(1, min(MAX_PIL_QUALITY, round(quality * 100))),
            optimize=True,
        )
    except (OSError, ValueError) as e:
        raise ImageNormalizationError(f"Failed to encode image: {e}") from e

    data = buf.getvalue()
    if not data:
        raise ImageNormalizationError("Failed to encode image: empty output")

    logger.debug(
        f"Compressed image {original_size} -> {len(data)} bytes ({width}x{height})"
    )

    return CompressedImage(
        base64=base64.b64encode(data).decode("utf-8"),
        width=width,
        height=height,
        original_size=original_size,
        compressed_size=len(data),
    )


def format_file_size(size: int) -> str:
    """Format a byte count for display."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
