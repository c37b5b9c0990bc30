"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and dependencies (database, Redis) are reachable. Redis is optional:
when no REDIS_URL is configured it reports "disabled", not an error.
The route is open, so failures are reported as a bare "error" and the
driver's message only goes to the server log.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from lingopal import __version__
from lingopal.cache import get_redis
from lingopal.db.engine import get_db

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.warning("health.database_error", error=str(e))
        checks["database"] = "error"

    redis = get_redis()
    if redis is None:
        checks["redis"] = "disabled"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as e:
            logger.warning("health.redis_error", error=str(e))
            checks["redis"] = "error"

    status = "healthy" if all(
        v in ("ok", "disabled") for k, v in checks.items() if k != "version"
    ) else "degraded"

    return {"status": status, **checks}
