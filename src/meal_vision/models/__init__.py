"""Pydantic models for API schemas."""

from .nutrition import (
    AnalyzeFailure,
    AnalyzeRequest,
    AnalyzeResponse,
    AnalyzeSuccess,
    Confidence,
    FoodItem,
    ImageMimeType,
    Macros,
    MealAnalysis,
)

__all__ = [
    # Request
    "AnalyzeRequest",
    "ImageMimeType",
    # Analysis
    "Confidence",
    "FoodItem",
    "Macros",
    "MealAnalysis",
    # Envelopes
    "AnalyzeFailure",
    "AnalyzeResponse",
    "AnalyzeSuccess",
]
