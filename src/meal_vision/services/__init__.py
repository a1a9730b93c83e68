"""Business logic services."""

from .analyze import AnalyzeOutcome, AnalyzeService
from .image_normalizer import CompressedImage, ImageNormalizationError, normalize_image
from .reconciler import ReconciliationError, parse_meal_analysis, reconcile
from .session import SessionGate

__all__ = [
    "AnalyzeOutcome",
    "AnalyzeService",
    "CompressedImage",
    "ImageNormalizationError",
    "ReconciliationError",
    "SessionGate",
    "normalize_image",
    "parse_meal_analysis",
    "reconcile",
]
