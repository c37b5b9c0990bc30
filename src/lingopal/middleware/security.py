"""Security headers middleware.

Every response gets no-sniff, no-framing and a conservative referrer
policy; HSTS is added only when the request arrived over HTTPS. Responses
from /api/auth carry bearer tokens and profiles, so they are also marked
uncacheable.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

HSTS = "max-age=31536000; includeSubDomains"

NO_STORE_PREFIX = "/api/auth/"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(BASE_HEADERS)
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = HSTS
        if request.url.path.startswith(NO_STORE_PREFIX):
            response.headers["Cache-Control"] = "no-store"
        return response
