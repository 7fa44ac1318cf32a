"""FastAPI application entry point.

Deployment Requirements:
- Binds to PORT from environment variable
- Health endpoint at /health (and under the API prefix) without auth
- All logs to stdout

Error Logging Requirements:
- Log all incoming requests with method, path, request_id
- Log request body at DEBUG level (sanitize sensitive fields)
- Log response status and timing for every request
- Return the uniform error envelope for every failure
- Log 4xx errors at WARNING, 5xx at ERROR
"""

import json
import logging
import time
import uuid
from collections.abc import Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import BaseRoute, Match

from seo_platform.api.v1 import router as api_v1_router
from seo_platform.core import responses
from seo_platform.core.config import get_settings
from seo_platform.core.database import db_manager
from seo_platform.core.errors import AppError, ErrorKind, ValidationError
from seo_platform.core.logging import get_logger, setup_logging
from seo_platform.integrations.dataforseo import close_dataforseo, init_dataforseo

# Set up logging before anything else
setup_logging()
logger = get_logger(__name__)

# Sensitive fields to redact from request body logs
SENSITIVE_FIELDS = {
    "password",
    "token",
    "secret",
    "api_key",
    "authorization",
}


def sanitize_body(body: Any) -> Any:
    """Redact sensitive fields from request body for logging."""
    if not isinstance(body, dict):
        return body
    sanitized: dict[str, Any] = {}
    for key, value in body.items():
        if key.lower() in SENSITIVE_FIELDS:
            sanitized[key] = "****"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_body(value)
        else:
            sanitized[key] = value
    return sanitized


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with timing and tags the response with X-Request-ID."""

    async def dispatch(self, request: Request, call_next: Any) -> Any:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.monotonic()
        method = request.method
        path = request.url.path

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "query_params": str(request.query_params)
                if request.query_params
                else None,
            },
        )

        if method not in ("GET", "HEAD", "OPTIONS") and logger.isEnabledFor(
            logging.DEBUG
        ):
            body = await request.body()
            if body:
                try:
                    logger.debug(
                        "Request body",
                        extra={
                            "request_id": request_id,
                            "body": sanitize_body(json.loads(body)),
                        },
                    )
                except json.JSONDecodeError:
                    logger.debug(
                        "Request body (non-JSON)",
                        extra={"request_id": request_id, "body_length": len(body)},
                    )

        try:
            response = await call_next(request)
        except Exception as exc:
            # Unhandled errors surface here rather than in an exception
            # handler, so the envelope and header are still applied.
            logger.error(
                "Unhandled exception",
                extra={
                    "request_id": request_id,
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                },
                exc_info=True,
            )
            response = responses.internal_error()

        duration_ms = (time.monotonic() - start_time) * 1000
        status_code = response.status_code
        response.headers["X-Request-ID"] = request_id

        log_extra = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
        }

        if status_code >= 500:
            logger.error("Request failed", extra=log_extra)
        elif status_code >= 400:
            logger.warning("Request error", extra=log_extra)
        else:
            logger.info("Request completed", extra=log_extra)

        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Initialize the database and DataForSEO client; close them on shutdown."""
    settings = get_settings()
    logger.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
    )

    try:
        db_manager.init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    client = await init_dataforseo()
    if not client.available:
        logger.warning(
            "DataForSEO not configured (missing DATAFORSEO_API_LOGIN/PASSWORD)"
        )

    if not settings.api_key:
        logger.warning("API_KEY not configured, all authenticated routes will reject")

    yield

    logger.info("Shutting down application")
    await close_dataforseo()
    await db_manager.close()
    logger.info("Application shutdown complete")


def _collect_methods(
    routes: Iterable[BaseRoute], scope: dict[str, Any], allowed: set[str]
) -> None:
    """Walk routes (descending into mounts and included routers) by path match."""
    for route in routes:
        match, child_scope = route.matches(scope)
        if match == Match.NONE:
            continue
        allowed |= getattr(route, "methods", None) or set()
        children = getattr(route, "routes", None)
        if children:
            _collect_methods(children, {**scope, **child_scope}, allowed)


def _allowed_methods(request: Request) -> list[str]:
    """Methods served by any route whose path matches the request path."""
    allowed: set[str] = set()
    _collect_methods(request.app.routes, dict(request.scope), allowed)
    allowed.discard("HEAD")
    return sorted(allowed)


def _health_payload() -> dict[str, Any]:
    return {
        "success": True,
        "message": f"{get_settings().app_name} is running",
        "timestamp": datetime.now(UTC).isoformat(),
    }


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Application error",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "code": exc.code,
                "error_message": exc.message,
            },
        )
        return responses.error(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report pydantic validation failures as a 400 with per-field details."""
        errors = [
            {
                "field": ".".join(str(loc) for loc in e["loc"] if loc != "body"),
                "message": e["msg"],
            }
            for e in exc.errors()
        ]
        logger.warning(
            "Validation error",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "errors": errors,
            },
        )
        return responses.error(
            ValidationError("Invalid request payload", {"errors": errors})
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Routing errors: unknown path is 404, wrong method is a 400."""
        if exc.status_code == 405:
            allowed = _allowed_methods(request)
            return responses.error(
                ValidationError(
                    f"Method {request.method} not allowed", {"allowed": allowed}
                )
            )
        if exc.status_code == 404:
            return responses.error(AppError(ErrorKind.NOT_FOUND, "Not found"))
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": {
                    "code": ErrorKind.INTERNAL.value
                    if exc.status_code >= 500
                    else ErrorKind.VALIDATION.value,
                    "message": str(exc.detail),
                    "details": None,
                },
            },
        )

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Liveness check; no authentication required."""
        return _health_payload()

    @app.get(f"{settings.api_prefix}/health", tags=["Health"])
    async def api_health_check() -> dict[str, Any]:
        return _health_payload()

    @app.get("/health/db", tags=["Health"])
    async def database_health() -> dict[str, Any]:
        """Check database connectivity."""
        connected = await db_manager.check_connection()
        return {
            "success": connected,
            "message": "Database reachable" if connected else "Database unreachable",
            "timestamp": datetime.now(UTC).isoformat(),
        }

    app.include_router(api_v1_router, prefix=settings.api_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "seo_platform.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
