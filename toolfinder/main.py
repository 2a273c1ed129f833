"""
FastAPI application entry point for the Tool Finder backend.

This module creates the FastAPI app instance, opens the database in the
lifespan and registers all routers.

Run locally with:
    uvicorn toolfinder.main:app --reload --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from toolfinder.config import Settings, settings as default_settings
from toolfinder.db.session import Database
from toolfinder.errors import InternalError, ToolFinderError, ValidationError
from toolfinder.routes.auth import router as auth_router
from toolfinder.routes.health import router as health_router
from toolfinder.routes.search import router as search_router
from toolfinder.routes.user import router as user_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _get_cors_origins(app_settings: Settings) -> list[str]:
    """
    Get allowed CORS origins based on environment.

    Environment-based configuration:
    - ENVIRONMENT=production: Uses CORS_ALLOWED_ORIGINS (none if unset)
    - Anything else: Allows CORS_ALLOWED_ORIGINS if set, otherwise localhost

    Session cookies require credentials, so a wildcard origin is never used.
    """
    if app_settings.CORS_ALLOWED_ORIGINS:
        logger.info(f"CORS configured with {len(app_settings.CORS_ALLOWED_ORIGINS)} allowed origins")
        return app_settings.CORS_ALLOWED_ORIGINS

    if app_settings.is_production():
        logger.warning(
            "CORS_ALLOWED_ORIGINS not set in production. "
            "No web origins allowed. Set CORS_ALLOWED_ORIGINS for web clients."
        )
        return []

    logger.info(f"CORS configured for {app_settings.ENVIRONMENT}: allowing localhost origins")
    return ["http://localhost:3000", "http://127.0.0.1:3000"]


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    """Reduce pydantic errors to JSON-safe {loc, msg, type} entries."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the module-level settings)

    The database handle is created in the lifespan from DATABASE_URL and
    stored on app.state.database; settings are stored on app.state.settings.
    """
    app_settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database = Database(app_settings.DATABASE_URL)
        database.create_all()
        app.state.database = database
        logger.info("Tool Finder API started")
        try:
            yield
        finally:
            database.dispose()
            logger.info("Tool Finder API stopped")

    app = FastAPI(
        title="Tool Finder API",
        description="Backend service for AI-powered tool recommendations",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # Request validation failures are client errors: 400, not FastAPI's 422
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = _validation_errors(exc)
        logger.warning(f"Validation error on {request.method} {request.url.path}: {errors}")

        return JSONResponse(
            status_code=ValidationError.status_code,
            content=ValidationError("Invalid request", details=errors).to_detail()
        )

    # Domain errors that escape a route keep their own status and code
    @app.exception_handler(ToolFinderError)
    async def domain_exception_handler(request: Request, exc: ToolFinderError):
        logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")

        return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)

        error = InternalError("Internal server error")
        return JSONResponse(status_code=error.status_code, content={"detail": error.to_detail()})

    # Configure CORS with environment-based origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_get_cors_origins(app_settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(search_router)

    return app


app = create_app()

logger.info("FastAPI app initialized successfully")
