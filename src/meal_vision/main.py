"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meal_vision.api.routes import analyze, auth
from meal_vision.core.config import get_settings
from meal_vision.core.exceptions import APIError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.api_version}")
    if not settings.is_llm_configured:
        logger.warning(
            f"LLM provider '{settings.llm_provider.value}' is not configured; "
            "analyze requests will fail with AI_ERROR"
        )

    yield

    # Shutdown
    from meal_vision.services.model_gateway import clear_gateway_cache, get_model_gateway

    if get_model_gateway.cache_info().currsize:
        await get_model_gateway().close()
        clear_gateway_cache()
    logger.info("Shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        description="Photo-based meal nutrition estimates from a vision-language model",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Render API errors as the failure envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_envelope(),
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.api_version,
            "llm": {
                "provider": settings.llm_provider.value,
                "model": settings.llm_model,
                "configured": settings.is_llm_configured,
                "timeout_seconds": settings.analysis_timeout_seconds,
            },
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": settings.app_name,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    # Include routers
    app.include_router(analyze.router, prefix="/analyze", tags=["Analyze"])
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])

    return app


# Create app instance
app = create_app()
