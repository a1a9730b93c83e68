"""Pydantic models for the meal analysis wire contract.

Attributes are snake_case in Python and camelCase on the wire.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Dump with camelCase keys, keeping nulls."""
        return self.model_dump(mode="json", by_alias=True)


class ImageMimeType(str, Enum):
    """Image encodings accepted by the analyze endpoint."""
    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"


class Confidence(str, Enum):
    """Model-reported certainty bucket."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalyzeRequest(WireModel):
    """Inbound analyze request."""

    model_config = ConfigDict(extra="ignore")

    image: str = Field(..., min_length=1, description="Base64 image, optionally a data URL")
    mime_type: ImageMimeType = Field(..., description="Encoding of the image")
    context: str | None = Field(
        None, max_length=500, description="Optional free-text context from the user"
    )


class Macros(WireModel):
    """Macronutrients in grams."""

    model_config = ConfigDict(frozen=True)

    protein: float = Field(..., ge=0)
    carbohydrates: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    # Nullable but required: the model must emit the key
    fiber: float | None = Field(..., ge=0)
    sugar: float | None = Field(..., ge=0)


class FoodItem(WireModel):
    """A single detected food or drink."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    estimated_portion: str
    calories: float


class MealAnalysis(WireModel):
    """Canonical nutrition estimate for one image + context pair."""

    model_config = ConfigDict(frozen=True)

    total_calories: float = Field(..., ge=0)
    macros: Macros
    food_items: list[FoodItem]
    confidence: Confidence
    notes: str | None = Field(...)

    @property
    def item_calories(self) -> float:
        """Sum of per-item calories."""
        return sum(item.calories for item in self.food_items)


class AnalyzeSuccess(WireModel):
    """Success envelope."""

    success: Literal[True] = True
    data: MealAnalysis


class AnalyzeFailure(WireModel):
    """Failure envelope with a stable error code."""

    success: Literal[False] = False
    error: str
    code: str


AnalyzeResponse = AnalyzeSuccess | AnalyzeFailure
