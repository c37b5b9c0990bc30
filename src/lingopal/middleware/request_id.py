"""Request ID + access log middleware.

Learn: Every request is tagged with the caller's X-Request-ID, or a fresh
UUID when none was sent. The tag is bound to structlog's contextvars, so
service-layer events ("user.created", "ai.request_failed", ...) and the
record of an unhandled 500 all carry it without passing it around. One
"http.request" event per request closes the loop with status and timing.

Unhandled exceptions are turned into the generic 500 here rather than in
Starlette's outermost error middleware, so the 500 still gets the
X-Request-ID header and passes back out through CORS.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

INTERNAL_ERROR = {"detail": "Internal server error"}

# Probes hit these constantly; logging them drowns everything else
QUIET_PATHS = frozenset({"/", "/api/health"})


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, echo it back, and log the outcome."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception("lingopal.unhandled_error", error_type=type(e).__name__)
            response = JSONResponse(status_code=500, content=INTERNAL_ERROR)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

        response.headers[REQUEST_ID_HEADER] = request_id
        if request.url.path not in QUIET_PATHS:
            logger.info(
                "http.request",
                status_code=response.status_code,
                duration_ms=elapsed_ms,
            )
        return response
