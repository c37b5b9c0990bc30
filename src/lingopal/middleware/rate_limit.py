"""Rate limiting middleware — Redis-based sliding window.

Learn: Uses a per-minute window counter stored in Redis.
Each IP gets a counter key like "lingopal:rl:{ip}:{bucket}:{minute}".
Credential endpoints (login, signup, password reset) get a stricter
limit to slow down brute-force and reset-token guessing.

Gracefully skips rate limiting if Redis is unavailable (e.g., in tests).
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from lingopal.cache import get_redis

logger = structlog.get_logger()

AUTH_PATHS = (
    "/api/auth/login",
    "/api/auth/signup",
    "/api/auth/forgot-password",
    "/api/auth/reset-password",
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per minute."""

    def __init__(self, app, default_rpm: int = 100, auth_rpm: int = 10):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm

    async def dispatch(self, request: Request, call_next) -> Response:
        redis = get_redis()
        if redis is None:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_auth = request.url.path.startswith(AUTH_PATHS)
        rpm = self.auth_rpm if is_auth else self.default_rpm

        # Window key: per IP, per bucket type, per minute
        window = int(time.time() // 60)
        bucket = "auth" if is_auth else "api"
        key = f"lingopal:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)  # 2-min TTL for safety
        except Exception as e:
            # Redis error: let the request through
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.info("rate_limit.exceeded", bucket=bucket)
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
