from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from katafree.core.config import Settings, get_settings
from katafree.core.errors import AppError, StorageError
from katafree.core.log import configure_logging
from katafree.core.rate_limiter import api_rate_limit
from katafree.repositories import Repository, build_repository
from katafree.routers import auth as auth_router
from katafree.routers import health as health_router
from katafree.routers import tasks as tasks_router
from katafree.routers import webhooks as webhooks_router
from katafree.services.notifications import SimulatedDispatcher

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("katafree.access")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, sniffing, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'self'")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        access_logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        logger.error(
            "%s store failure on %s %s: %s",
            exc.backend,
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
        return _error(500, "Server error")

    @app.exception_handler(AppError)
    async def app_error(request: Request, exc: AppError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        fields = sorted({".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()})
        return _error(400, f"Invalid fields: {', '.join(f for f in fields if f) or 'body'}")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "Server error")


def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """Build the API. The storage backend is chosen here, once, for the app's lifetime."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.repository.close()

    app = FastAPI(title="katafree API", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository or build_repository(settings)
    app.state.dispatcher = SimulatedDispatcher()

    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestLogMiddleware)
    _install_error_handlers(app)

    limited = [Depends(api_rate_limit)]
    app.include_router(health_router.router, dependencies=limited)
    app.include_router(auth_router.router, dependencies=limited)
    app.include_router(tasks_router.router, dependencies=limited)
    app.include_router(webhooks_router.router, dependencies=limited)

    return app
