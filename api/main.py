"""
Insurance CRM API: application factory.

Run with: uvicorn main:create_app --factory (from the `api/` directory).
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Request

from auth import router as auth_router
from claims import router as claims_router
from companies import router as companies_router
from contacts import router as contacts_router
from core import db
from core.config import Settings
from core.errors import register_exception_handlers
from core.log import configure_logging
from core.middleware import configure_middleware
from dashboard import router as dashboard_router
from policies import router as policies_router
from reports import router as reports_router
from tasks import router as tasks_router

logger = logging.getLogger(__name__)

RESOURCES = ("auth", "companies", "contacts", "policies", "claims", "tasks", "reports", "dashboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    configure_logging(settings)
    # Open the DB pool once per process.
    pool, database = await db.connect(settings)
    app.state.db = database
    logger.info("application_started environment=%s api=%s", settings.environment, settings.api_prefix)
    try:
        yield
    finally:
        app.state.db = None
        await db.close(pool)
        logger.info("application_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = Settings()

    app = FastAPI(title="Insurance CRM API", version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.db = None

    configure_middleware(app, settings)
    register_exception_handlers(app)

    api = APIRouter(prefix=settings.api_prefix)
    api.include_router(auth_router.router, tags=["auth"])
    api.include_router(companies_router.router, tags=["companies"])
    api.include_router(contacts_router.router, tags=["contacts"])
    api.include_router(policies_router.router, tags=["policies"])
    api.include_router(claims_router.router, tags=["claims"])
    api.include_router(tasks_router.router, tags=["tasks"])
    api.include_router(reports_router.router, tags=["reports"])
    api.include_router(dashboard_router.router, tags=["dashboard"])

    @api.get("")
    def index() -> dict:
        return {
            "message": "Insurance CRM API",
            "version": settings.api_version,
            "endpoints": {name: f"{settings.api_prefix}/{name}" for name in RESOURCES},
        }

    app.include_router(api)

    @app.get("/health")
    def health(request: Request) -> dict:
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "environment": settings.environment,
        }

    return app
