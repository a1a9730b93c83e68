"""Session API routes.

Exchanges the shared access code for an HTTP-only session cookie.
"""

import json
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from meal_vision.api.dependencies import SessionGateDep, SessionTokenDep, SettingsDep

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", summary="Exchange access code for a session")
async def login(
    request: Request,
    gate: SessionGateDep,
    settings: SettingsDep,
) -> JSONResponse:
    """
    Validate the access code and set the session cookie.

    The token is also returned in the body for non-browser clients.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    code = body.get("code") if isinstance(body, dict) else None
    if not code or not isinstance(code, str):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Code required"},
        )

    token = gate.issue(code)
    if token is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "error": "Invalid code"},
        )

    response = JSONResponse(content={"success": True, "token": token})
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    return response


@router.get("", summary="Check session status")
async def session_status(token: SessionTokenDep, gate: SessionGateDep) -> dict:
    """Report whether the caller holds a valid session."""
    return {"authenticated": gate.verify(token)}


@router.delete("", summary="Log out")
async def logout(
    token: SessionTokenDep,
    gate: SessionGateDep,
    settings: SettingsDep,
) -> JSONResponse:
    """Revoke the session and clear the cookie."""
    gate.revoke(token)
    response = JSONResponse(content={"success": True})
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response
