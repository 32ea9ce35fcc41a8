"""Request context middleware for the catalog API.

Every request gets a correlation ID. The ID, the catalog resource being
addressed and the repository backend are bound to the structlog context
so that service and repository log events carry them.
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from catalog_service.infrastructure.config import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def resource_for_path(path: str) -> str:
    """Name the catalog resource a path addresses.

    Example: "/products/123/variants/generate" -> "products".
    """
    segment = path.strip("/").split("/", 1)[0]
    return segment or "root"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds request ID, resource and backend to the log context.

    The request ID is taken from the X-Request-ID header when present,
    stored on ``request.state`` for the error handlers and echoed on
    the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            resource=resource_for_path(request.url.path),
            backend=settings.repository_backend,
        ):
            response = await call_next(request)
            logger.info(
                "Catalog request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install the request context middleware.

    Unhandled exceptions are rendered by the application's exception
    handlers, not here.
    """
    app.add_middleware(RequestContextMiddleware)
