"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .api import (
    activities_router,
    assist_router,
    auth_router,
    dashboard_router,
    members_router,
    schedules_router,
    tasks_router,
    workspace_router,
)
from .core.config import ConfigurationError, Environment, StorageBackend, settings
from .core.logging_config import setup_logging
from .exceptions import TeamSyncException
from .middleware.exception_handler import teamsync_exception_handler, unhandled_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .repositories.gateway import PersistenceGateway, create_gateway
from .services.session_service import SessionRegistry

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def _warn_insecure_defaults() -> None:
    if settings.environment != Environment.DEVELOPMENT:
        return
    if settings.jwt_secret_key == "dev-insecure-key-change-me":
        logger.warning(
            "SECURITY: JWT_SECRET_KEY is the default. Anyone can forge tokens. "
            "Generate a secure key: openssl rand -hex 32"
        )
    if settings.storage_backend == StorageBackend.LOCAL:
        logger.warning("STORAGE_BACKEND=local: data lives in JSON files under %s", settings.local_storage_dir)


def create_app(gateway: Optional[PersistenceGateway] = None) -> FastAPI:
    """Build the application. ``gateway`` overrides the configured backend (tests)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Environment: {settings.environment.value}")
        try:
            settings.validate_production_config()
        except ConfigurationError as e:
            logger.critical(f"STARTUP BLOCKED: {e}")
            raise SystemExit(1) from e
        _warn_insecure_defaults()

        active_gateway = gateway or create_gateway(settings)
        app.state.gateway = active_gateway
        app.state.sessions = SessionRegistry(active_gateway)
        app.state.started = time.monotonic()
        logger.info(
            "TeamSync API started | env=%s | storage=%s | assist=%s",
            settings.environment.value,
            settings.storage_backend.value,
            "enabled" if settings.assist_model else "disabled",
        )

        yield

        await app.state.sessions.close_all()
        if gateway is None:
            await active_gateway.close()
        logger.info("TeamSync API stopped")

    app = FastAPI(
        title="TeamSync API",
        description=(
            "REST API for the TeamSync collaboration workspace: personal and team "
            "documents in folders, a shared schedule calendar, personal tasks, an "
            "activity feed and an LLM writing assistant.\n\n"
            "**Authentication:** log in at `/api/auth/login` and send the returned "
            "`Bearer` token in the `Authorization` header."
        ),
        version=VERSION,
        lifespan=lifespan,
    )

    # Outermost first: CORS wraps request context.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(TeamSyncException, teamsync_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(auth_router)
    app.include_router(workspace_router)
    app.include_router(tasks_router)
    app.include_router(schedules_router)
    app.include_router(activities_router)
    app.include_router(dashboard_router)
    app.include_router(members_router)
    app.include_router(assist_router)

    @app.get("/")
    def root():
        return {"name": "TeamSync API", "version": VERSION, "status": "running"}

    @app.get("/health")
    async def health_check(request: Request):
        """Storage probe. Never raises: a failing backend reports ``degraded``."""
        storage_status = "ok"
        try:
            await request.app.state.gateway.users.list()
        except TeamSyncException:
            storage_status = "error"
        return {
            "status": "healthy" if storage_status == "ok" else "degraded",
            "storage": storage_status,
            "backend": settings.storage_backend.value,
            "sessions": len(request.app.state.sessions),
            "uptime_seconds": round(time.monotonic() - request.app.state.started),
            "version": VERSION,
        }

    return app


app = create_app()
