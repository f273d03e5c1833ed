from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from account_api.core.config import Settings, get_settings
from account_api.core.logging_config import setup_logging
from account_api.core.rate_limiter import RateLimiter
from account_api.core.security import CredentialHasher
from account_api.db.session import Database
from account_api.repositories.user_repository import UserRepository
from account_api.routers import v1 as v1_router
from account_api.services.account_service import AccountService

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers for a JSON-only API."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"message": "Internal server error."}, status_code=500)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the application; the database lives from startup to shutdown."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database(settings.database_url)
        db.create_all()
        app.state.database = db
        app.state.account_service = AccountService(
            repository=UserRepository(db),
            hasher=CredentialHasher.from_settings(settings),
        )
        logger.info("Account API started (env=%s)", settings.app_env)
        try:
            yield
        finally:
            db.dispose()
            logger.info("Account API stopped")

    app = FastAPI(title="Account API", version="3.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limiter = RateLimiter()

    allowed_cors = set(settings.cors_origins)
    if settings.app_env != "prod":
        allowed_cors.update({"http://localhost:8000", "http://127.0.0.1:8000"})
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(v1_router.router)
    return app


app = create_app()
