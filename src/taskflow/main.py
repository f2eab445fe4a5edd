"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskflow import __version__
from taskflow.api.router import api_router
from taskflow.config import Settings, settings
from taskflow.core.admission import AdmissionMiddleware, AdmissionPipeline, AdmissionStage
from taskflow.core.auth import AuthenticationGate
from taskflow.core.cache import close_redis_pool
from taskflow.core.database import async_engine
from taskflow.core.errors import register_exception_handlers
from taskflow.core.logging import RequestIdMiddleware, RequestLoggingMiddleware
from taskflow.core.rate_limit import RateLimitStage


# Configure structlog
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        (
            structlog.processors.JSONRenderer()
            if settings.is_production
            else structlog.dev.ConsoleRenderer()
        ),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        rate_limit_enabled=settings.rate_limit_enabled,
    )

    yield

    # Shutdown
    logger.info("application_shutdown")

    # Close Redis connection pool
    await close_redis_pool()
    logger.info("redis_pool_closed")

    await async_engine.dispose()
    logger.info("database_engine_disposed")


def build_admission_stages(config: Settings) -> list[AdmissionStage]:
    """Build the admission stages in the order requests pass them.

    The rate limiter runs first so that requests with bad credentials
    still count against the caller's window.
    """
    return [
        RateLimitStage.from_settings(config),
        AuthenticationGate(config.secret_key, config.jwt_algorithm),
    ]


def create_app(stages: Sequence[AdmissionStage] | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        stages: Admission stages to run before route handlers. Defaults to
            the stages built from the global settings.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Per-user task management API",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    pipeline = AdmissionPipeline(
        stages if stages is not None else build_admission_stages(settings)
    )

    # Middleware added last runs first: CORS -> request ID -> logging -> admission
    app.add_middleware(AdmissionMiddleware, pipeline=pipeline)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-Request-ID"],
    )

    # Register exception handlers for RFC 7807 error responses
    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router)

    return app
