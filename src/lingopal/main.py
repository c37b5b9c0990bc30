"""FastAPI application factory.

Learn: App factory pattern — create_app(settings) returns a configured
FastAPI instance. Settings are built once at process entry and injected
here; collaborators that live for the whole process (mailer, AI client)
are created from them and parked on app.state. Lifespan manages the
database engine and the optional Redis pool.

Run with: uvicorn --factory lingopal.main:create_app  (or `lingopal serve`)
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from lingopal import __version__
from lingopal.api import api_router
from lingopal.cache import close_redis, init_redis
from lingopal.config import Settings, load_settings
from lingopal.db.engine import build_engine, build_session_factory, check_connection
from lingopal.errors import ServiceError
from lingopal.middleware.rate_limit import RateLimitMiddleware
from lingopal.middleware.request_id import INTERNAL_ERROR, RequestIdMiddleware
from lingopal.middleware.security import SecurityHeadersMiddleware
from lingopal.services.mailer import Mailer
from lingopal.services.tutor_ai import TutorAI

logger = structlog.get_logger()


def configure_logging(debug: bool = False) -> None:
    """structlog setup: contextvars (request id) merged into every event."""
    level = logging.DEBUG if debug else logging.INFO
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    A database that can't be reached aborts startup.
    """
    settings: Settings = app.state.settings
    logger.info(
        "lingopal.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    if settings.frontend_url_is_default:
        logger.warning(
            "lingopal.frontend_url_default",
            frontend_url=settings.frontend_url,
            hint="set LINGOPAL_FRONTEND_URL so reset links point at the deployed frontend",
        )

    engine = build_engine(settings)
    try:
        await check_connection(engine)
    except Exception as e:
        logger.error("lingopal.database_unavailable", error=str(e))
        await engine.dispose()
        raise
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    logger.info("lingopal.database_connected")

    if settings.redis_url:
        try:
            await init_redis(settings.redis_url)
            logger.info("lingopal.redis_connected")
        except Exception as e:
            logger.warning("lingopal.redis_unavailable", error=str(e))
            # Redis is optional; only rate limiting depends on it

    yield

    logger.info("lingopal.shutdown")
    await close_redis()
    await engine.dispose()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Missing or malformed input is a plain 400 for clients
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Invalid request",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("lingopal.unhandled_error", error_type=type(exc).__name__)
        # Reached only for failures outside RequestIdMiddleware
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or load_settings()
    configure_logging(settings.debug)

    app = FastAPI(
        title="LingoPal API",
        description="Backend for AI-assisted English speaking practice",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.mailer = Mailer(settings)
    app.state.tutor_ai = TutorAI(settings)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → RateLimit → handler
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    @app.get("/", include_in_schema=False)
    async def root():
        return PlainTextResponse("API is running...")

    app.include_router(api_router)
    return app
