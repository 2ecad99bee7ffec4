"""FastAPI application entry point.

Competitive event platform: event registry, ticket ledger, single
elimination brackets and payment reconciliation.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from tourney import __version__
from tourney.api import dashboard_router, events_router, tickets_router, webhooks_router
from tourney.config import get_settings
from tourney.logging_config import bind_context, clear_context, configure_logging, get_logger
from tourney.middleware.prometheus import setup_prometheus
from tourney.middleware.sentry import init_sentry
from tourney.schemas import HealthCheckResponse
from tourney.utils.db import check_db, close_db, init_db
from tourney.utils.errors import DomainError, ErrorCode, ValidationError
from tourney.utils.json_utils import ORJSONResponse
from tourney.utils.redis_client import close_redis, get_redis, init_redis

settings = get_settings()

# Configure structured logging
configure_logging(
    log_level=settings.log_level,
    json_logs=settings.app_env == "production",
    app_env=settings.app_env,
)
logger = get_logger(__name__)

# Initialize Sentry
sentry_enabled = init_sentry(
    dsn=settings.sentry_dsn,
    environment=settings.app_env,
    release=__version__,
    traces_sample_rate=settings.sentry_traces_sample_rate
    if settings.app_env == "production"
    else 0.0,
    profiles_sample_rate=settings.sentry_profiles_sample_rate
    if settings.app_env == "production"
    else 0.0,
)
if sentry_enabled:
    logger.info("sentry_initialized")
elif settings.app_env == "production":
    logger.warning("sentry_disabled", reason="SENTRY_DSN not configured")


# =============================================================================
# Lifespan Events
# =============================================================================


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("application_starting", env=settings.app_env)

    await init_db()
    logger.info("database_connected")

    try:
        redis_instance = await init_redis()
    except (RedisError, OSError) as e:
        # Notifications are best effort; run without them
        logger.warning("redis_unavailable", error=str(e))
        redis_instance = None
    if redis_instance is not None:
        logger.info("redis_connected")

    if not settings.payment_webhook_secret:
        logger.warning("payment_webhook_disabled", reason="PAYMENT_WEBHOOK_SECRET not configured")

    yield

    logger.info("application_stopping")
    await close_redis()
    await close_db()


# =============================================================================
# Application
# =============================================================================


app = FastAPI(
    title="Tourney API",
    version=__version__,
    description="Competitive event registration, ticketing and brackets",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

prometheus_instrumentator = setup_prometheus(app, app_version=__version__)


# =============================================================================
# Middleware
# =============================================================================


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add X-Request-ID header to all requests and responses."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = datetime.now(timezone.utc)

        clear_context()
        bind_context(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=round(duration, 3),
        )

        return response


app.add_middleware(RequestIDMiddleware)

cors_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID", "X-Webhook-Secret"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# Error Handlers
# =============================================================================


ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.EVENT_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.STORAGE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_request_id(request: Request) -> str:
    """Get request ID from request state or headers."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("X-Request-ID", str(uuid.uuid4()))


def create_error_response(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    """Create standardized error response."""
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
        "traceId": trace_id,
    }


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> ORJSONResponse:
    """Handle domain errors raised by services."""
    trace_id = get_request_id(request)
    status_code = ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if status_code >= 500:
        logger.error("domain_error", code=exc.code.value, message=exc.message, trace_id=trace_id)
    else:
        logger.warning("domain_error", code=exc.code.value, message=exc.message, trace_id=trace_id)

    return ORJSONResponse(
        status_code=status_code,
        content=create_error_response(
            code=exc.code.value,
            message=exc.message,
            details=exc.details,
            trace_id=trace_id,
        ),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> ORJSONResponse:
    """Render request body/query validation failures as VALIDATION_ERROR."""
    error = ValidationError.from_errors(list(exc.errors()))
    return await domain_error_handler(request, error)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> ORJSONResponse:
    """Hide driver errors behind a generic storage error."""
    trace_id = get_request_id(request)
    logger.error(
        "database_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        trace_id=trace_id,
    )
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(
            code=ErrorCode.STORAGE_ERROR.value,
            message="A storage error occurred",
            trace_id=trace_id,
        ),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(
    request: Request, exc: HTTPException
) -> ORJSONResponse:
    """Handle HTTP exceptions."""
    trace_id = get_request_id(request)

    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = dict(exc.detail)
        content["traceId"] = trace_id
    else:
        content = create_error_response(
            code="HTTP_ERROR",
            message=str(exc.detail),
            trace_id=trace_id,
        )

    return ORJSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Handle unexpected exceptions."""
    trace_id = get_request_id(request)

    logger.error(
        "unexpected_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        trace_id=trace_id,
        exc_info=True,
    )

    # Don't expose internal error details in production
    message = "Internal server error"
    if settings.app_debug:
        message = f"{type(exc).__name__}: {exc}"

    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(
            code=ErrorCode.INTERNAL_ERROR.value,
            message=message,
            trace_id=trace_id,
        ),
    )


# =============================================================================
# Health Check Endpoints
# =============================================================================


@app.get(
    "/health",
    tags=["Health"],
    summary="Health check endpoint",
    response_model=HealthCheckResponse,
)
async def health_check() -> HealthCheckResponse:
    """Check application health status.

    Returns:
        Health status including database and Redis connectivity.
    """
    health_status = HealthCheckResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        services={"database": "unknown", "redis": "unknown"},
    )

    if await check_db():
        health_status.services["database"] = "healthy"
    else:
        health_status.services["database"] = "unhealthy"
        health_status.status = "degraded"

    current_redis = get_redis()
    if current_redis is None:
        health_status.services["redis"] = "disabled"
    else:
        try:
            await current_redis.ping()
            health_status.services["redis"] = "healthy"
        except (RedisError, OSError) as e:
            health_status.services["redis"] = f"unhealthy: {e}"
            logger.error("redis_health_check_failed", error=str(e))

    return health_status


@app.get(
    "/health/live",
    tags=["Health"],
    summary="Liveness probe",
)
async def liveness_probe() -> dict[str, str]:
    """Kubernetes liveness probe endpoint."""
    return {"status": "alive"}


@app.get(
    "/health/ready",
    tags=["Health"],
    summary="Readiness probe",
)
async def readiness_probe():
    """Kubernetes readiness probe endpoint.

    Ready when the database answers; Redis is optional.
    """
    if await check_db():
        return {"status": "ready"}

    logger.error("readiness_probe_failed", dependency="database")
    return ORJSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not ready", "error": "database unavailable"},
    )


# =============================================================================
# API Routers
# =============================================================================


API_V1_PREFIX = "/api/v1"

app.include_router(events_router, prefix=API_V1_PREFIX)
app.include_router(tickets_router, prefix=API_V1_PREFIX)
app.include_router(webhooks_router, prefix=API_V1_PREFIX)
app.include_router(dashboard_router, prefix=API_V1_PREFIX)


@app.get(
    "/",
    tags=["Root"],
    summary="API root endpoint",
)
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "Tourney API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tourney.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        workers=1 if settings.app_debug else settings.uvicorn_workers,
    )
