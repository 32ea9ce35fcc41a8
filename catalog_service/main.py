"""Catalog service main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from catalog_service.api.attributes import router as attributes_router
from catalog_service.api.categories import router as categories_router
from catalog_service.api.health import router as health_router
from catalog_service.api.middleware import setup_middleware
from catalog_service.api.products import router as products_router
from catalog_service.domain.exceptions import (
    DomainError,
    DuplicateSlugUnderParentError,
    DuplicateVariantCombinationError,
    NotFoundError,
)
from catalog_service.infrastructure.config import settings
from catalog_service.infrastructure.database import create_tables
from catalog_service.infrastructure.logging_config import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    configure_logging()
    logger.info(
        "Starting catalog service",
        version=settings.api_version,
        debug=settings.debug,
        backend=settings.repository_backend,
    )
    if settings.repository_backend == "sql":
        await create_tables()
        logger.info("Database tables ready")

    yield

    # Shutdown
    logger.info("Shutting down catalog service")


app = FastAPI(
    title="Catalog Service",
    description="Category hierarchy, attribute schemas and variant generation",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Request context middleware (request ID, log context)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(categories_router)
app.include_router(attributes_router)
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def status_for_domain_error(exc: DomainError) -> int:
    """Map a domain error to its HTTP status code."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (DuplicateSlugUnderParentError, DuplicateVariantCombinationError)):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render domain errors in the standard error format."""
    request_id = getattr(request.state, "request_id", None)
    status_code = status_for_domain_error(exc)

    logger.info(
        "Domain error",
        path=request.url.path,
        method=request.method,
        error_code=exc.code,
        status_code=status_code,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": exc.code,
            "message": exc.message,
            "details": exc.details,
            "request_id": request_id,
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", {})
    else:
        error_code = "ERROR"
        message = str(detail)
        details = {}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": {},
            "request_id": request_id,
        },
    )
