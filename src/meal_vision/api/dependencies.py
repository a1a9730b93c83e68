"""FastAPI dependency injection factories."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from meal_vision.core.config import Settings, get_settings
from meal_vision.core.exceptions import UnauthorizedError
from meal_vision.services.analyze import AnalyzeService, GatewayProvider
from meal_vision.services.model_gateway import get_model_gateway
from meal_vision.services.session import SessionGate


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache
def get_session_gate() -> SessionGate:
    """
    Get the process-wide session gate.

    Returns:
        SessionGate configured from settings
    """
    settings = get_settings()
    return SessionGate(
        access_code=settings.access_code,
        secret=settings.session_secret,
        max_age_seconds=settings.session_max_age_seconds,
    )


SessionGateDep = Annotated[SessionGate, Depends(get_session_gate)]


def get_session_token(request: Request, settings: SettingsDep) -> str | None:
    """
    Read the session token from the cookie or a Bearer header.

    Returns:
        Token string if present
    """
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    auth = request.headers.get("authorization", "")
    scheme, _, credentials = auth.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


SessionTokenDep = Annotated[str | None, Depends(get_session_token)]


def require_session(token: SessionTokenDep, gate: SessionGateDep) -> str:
    """
    Require a valid session before any pipeline stage runs.

    Raises:
        UnauthorizedError: If the token is missing or invalid
    """
    if not gate.verify(token):
        raise UnauthorizedError()
    return token


def get_gateway() -> GatewayProvider:
    """
    Get a provider for the configured model gateway.

    The gateway is resolved by the analyze pipeline only after the request
    passes validation, so configuration faults never mask a 400.

    Returns:
        Zero-argument callable returning the gateway
    """
    return get_model_gateway


def get_analyze_service(
    settings: SettingsDep,
    gateway: GatewayProvider = Depends(get_gateway),
) -> AnalyzeService:
    """
    Get AnalyzeService instance.

    Args:
        settings: Injected settings
        gateway: Injected gateway provider

    Returns:
        AnalyzeService instance
    """
    return AnalyzeService(gateway, settings)


# Type aliases for service dependencies
SessionDep = Annotated[str, Depends(require_session)]
AnalyzeServiceDep = Annotated[AnalyzeService, Depends(get_analyze_service)]
