"""Analyze API route.

Accepts a captured meal image and returns a structured nutrition estimate.
"""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from meal_vision.api.dependencies import AnalyzeServiceDep, SessionDep
from meal_vision.core.exceptions import InvalidRequestError
from meal_vision.models.nutrition import AnalyzeFailure, AnalyzeSuccess

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=AnalyzeSuccess,
    responses={
        400: {"model": AnalyzeFailure, "description": "Invalid request or image too large"},
        401: {"model": AnalyzeFailure, "description": "Missing or invalid session"},
        500: {"model": AnalyzeFailure, "description": "AI, parse or internal error"},
        504: {"model": AnalyzeFailure, "description": "Model call timed out"},
    },
    summary="Analyze a meal image",
    description="""
    Estimate calories, macros and food items from a meal photo.

    **Request body (JSON):**
    - `image`: base64 image, optionally a `data:` URL (max 4 MB decoded)
    - `mimeType`: `image/jpeg`, `image/png` or `image/webp`
    - `context`: optional free text (max 500 chars), e.g. to refine a prior result

    **Error Codes:**
    - `INVALID_REQUEST`, `IMAGE_TOO_LARGE` (400)
    - `UNAUTHORIZED` (401)
    - `AI_ERROR`, `PARSE_ERROR`, `INTERNAL_ERROR` (500)
    - `TIMEOUT` (504)
    """,
)
async def analyze_meal(
    request: Request,
    _session: SessionDep,
    service: AnalyzeServiceDep,
) -> JSONResponse:
    """
    Run the analysis pipeline on one image.

    Every outcome uses the same envelope shape.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Invalid JSON in analyze body: {e}")
        error = InvalidRequestError()
        return JSONResponse(status_code=error.status_code, content=error.to_envelope())

    outcome = await service.analyze(body)
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_wire())
