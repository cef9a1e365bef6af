"""
FastAPI Application Factory.

Creates and configures the FastAPI application with security headers,
core endpoints and the evaluation module routers.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Builds the evaluation container on startup (unless a test has already
    overridden it) and releases database connections on shutdown.
    """
    from core.database import close_db_connections
    from modules.evaluation.dependencies import get_container

    _logger.info("Starting EvalMax API...")
    if get_container not in app.dependency_overrides:
        get_container()
    _logger.info("Evaluation module ready")

    yield

    _logger.info("Shutting down EvalMax API...")
    close_db_connections()
    _logger.info("Cleanup complete")


def create_base_app(
    title: str = "EvalMax API",
    description: str = "Attendance approval, work rate and payout evaluation",
    version: str = "1.0.0",
) -> FastAPI:
    """
    Create the base FastAPI application with middleware and core routes.

    Args:
        title: API title for OpenAPI documentation.
        description: API description for OpenAPI documentation.
        version: API version string.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(title=title, description=description, version=version, lifespan=lifespan)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    _register_core_routes(app)
    return app


def _register_core_routes(app: FastAPI) -> None:
    """Register core API routes (health check)."""

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "EvalMax"}


def create_app() -> FastAPI:
    """Create the application with the evaluation routers mounted."""
    from modules.evaluation.routers import approval_router, work_rate_router

    app = create_base_app()
    app.include_router(approval_router)
    app.include_router(work_rate_router)
    _logger.info("Registered evaluation routers")
    return app
