# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the Escolaris API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src import __version__
from src.api.middleware.tenant import TenantMiddleware
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import get_settings
from src.domains.enrollment import EnrollmentError
from src.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    get_session,
    init_database,
)
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and opens the database pool on startup; closes
    the pool on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)

    logger.info(
        "Starting Escolaris API",
        environment=settings.environment,
        debug=settings.debug,
    )

    await init_database(settings)
    logger.info("Database connection initialized")

    yield

    await close_database()
    logger.info("Database connection closed")
    logger.info("Shutting down Escolaris API")


async def enrollment_error_handler(request: Request, exc: EnrollmentError) -> JSONResponse:
    """Translate enrollment errors into their HTTP status.

    Args:
        request: The failed request.
        exc: The raised enrollment error.

    Returns:
        JSON response with the error message.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate storage failures into 503 or 500 without leaking SQL.

    Raw SQLAlchemy errors that escape a route are wrapped first, so both
    kinds produce the same response shape.

    Args:
        request: The failed request.
        exc: DatabaseError or SQLAlchemyError.

    Returns:
        JSON response with a generic message.
    """
    if not isinstance(exc, DatabaseError):
        exc = DatabaseError("Database operation failed", exc)

    logger.error(
        "Database error",
        path=request.url.path,
        status_code=exc.status_code,
        error=str(exc),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": "DatabaseError"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    docs_enabled = settings.api.docs_enabled and not settings.is_production

    app = FastAPI(
        title=settings.api.title,
        description="Multi-tenant school management backend",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # =========================================================================
    # Exception handlers
    # =========================================================================

    app.add_exception_handler(EnrollmentError, enrollment_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================

    app.add_middleware(
        TenantMiddleware,
        session_factory=get_session,
        base_domain=settings.tenant.base_domain,
        header=settings.tenant.header,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================

    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router, prefix=settings.api.prefix)

    return app
