"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the repository and analytics services, registers routers, and runs
startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from training_analytics.controllers.analytics_controller import router as analytics_router
from training_analytics.controllers.records_controller import router as records_router
from training_analytics.controllers.reports_controller import router as reports_router
from training_analytics.repository.data_repository import DataRepository
from training_analytics.services.analytics_service import AnalyticsEngine
from training_analytics.services.dashboard_service import DashboardWorkflowService
from training_analytics.services.export_service import ExportService
from training_analytics.services.stats_service import StatsService
from training_analytics.utils.config import Settings, get_settings
from training_analytics.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, *, seed_demo_data: bool = True) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services are created here and handed to the routers through app.state,
    so every dependency is traceable from this function.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Services (pure analytics, no direct DB access) ---
    analytics_engine = AnalyticsEngine(settings=settings)
    dashboard_service = DashboardWorkflowService(
        repository=repository,
        engine=analytics_engine,
        stats_service=StatsService(),
        export_service=ExportService(),
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, seed_demo_data=seed_demo_data)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(analytics_router)
    app.include_router(records_router)
    app.include_router(reports_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.repository = repository
    app.state.analytics_engine = analytics_engine
    app.state.dashboard_service = dashboard_service

    return app


def _startup(app: FastAPI, *, seed_demo_data: bool) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    The schema must exist before seeding; seeding is skipped when any record
    table already holds rows.
    """
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if seed_demo_data:
        logger.info("Startup: seeding synthetic training records (skipped if tables not empty)")
        repository.seed_synthetic_data()

    logger.info("Startup complete; system ready")


# Module-level app object for uvicorn
app = create_app()
