"""
Response reconciliation.

Turns raw model text into a validated MealAnalysis. The primary pass parses
the whole text; a single recovery pass re-parses the span between the first
``{`` and the last ``}`` for models that wrap JSON in prose.
"""

import json
import logging

from pydantic import ValidationError

from meal_vision.models.nutrition import MealAnalysis

logger = logging.getLogger(__name__)

# Raw output is only ever logged at DEBUG, truncated
RAW_LOG_LIMIT = 500

# Advisory calorie check tolerance
CALORIE_TOLERANCE_ABS = 50.0
CALORIE_TOLERANCE_REL = 0.15


class ReconciliationError(Exception):
    """Model output could not be reconciled into a MealAnalysis."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


def _parse(text: str) -> MealAnalysis:
    """Parse and validate; raises on any failure."""
    data = json.loads(text)
    return MealAnalysis.model_validate(data)


def _describe(error: Exception) -> list[str]:
    """Summarize a parse/validation failure without echoing the input."""
    if isinstance(error, ValidationError):
        return [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['type']}"
            for err in error.errors()
        ]
    if isinstance(error, json.JSONDecodeError):
        return [f"json: {error.msg} at pos {error.pos}"]
    return [f"{type(error).__name__}"]


def extract_json_span(text: str) -> str | None:
    """Return the substring from the first '{' to the last '}', if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def parse_meal_analysis(raw_text: str) -> MealAnalysis:
    """
    Reconcile raw model output into a MealAnalysis.

    Args:
        raw_text: Raw completion text

    Returns:
        Validated MealAnalysis

    Raises:
        ReconciliationError: If neither the primary nor the recovery pass
            yields a valid structure
    """
    try:
        analysis = _parse(raw_text)
    except (json.JSONDecodeError, ValidationError, TypeError) as primary_error:
        primary_errors = _describe(primary_error)

        span = extract_json_span(raw_text)
        if span is None or span == raw_text:
            raise ReconciliationError(
                "Model output is not a valid MealAnalysis", primary_errors
            ) from primary_error

        try:
            analysis = _parse(span)
        except (json.JSONDecodeError, ValidationError, TypeError) as recovery_error:
            raise ReconciliationError(
                "Model output is not a valid MealAnalysis after repair",
                primary_errors + _describe(recovery_error),
            ) from recovery_error

        logger.info("Recovered MealAnalysis from prose-wrapped model output")

    _check_calories(analysis)
    return analysis


def reconcile(raw_text: str) -> MealAnalysis | None:
    """
    Reconcile raw model output, returning None on failure.

    Failures are logged with field-level detail; the raw text itself only
    goes to the DEBUG log.
    """
    try:
        return parse_meal_analysis(raw_text)
    except ReconciliationError as e:
        logger.warning(
            f"Failed to reconcile model output: {e.message}",
            extra={"errors": e.errors, "raw_chars": len(raw_text)},
        )
        logger.debug(f"Unreconciled model output: {raw_text[:RAW_LOG_LIMIT]!r}")
        return None


def calorie_discrepancy(analysis: MealAnalysis) -> float:
    """Absolute difference between totalCalories and the per-item sum."""
    return abs(analysis.total_calories - analysis.item_calories)


def _check_calories(analysis: MealAnalysis) -> None:
    """Log when the model's total disagrees with its own items. Never rejects."""
    if not analysis.food_items:
        return
    tolerance = max(CALORIE_TOLERANCE_ABS, analysis.total_calories * CALORIE_TOLERANCE_REL)
    diff = calorie_discrepancy(analysis)
    if diff > tolerance:
        logger.warning(
            f"totalCalories {analysis.total_calories} differs from item sum "
            f"{analysis.item_calories} by {diff:.0f}"
        )
