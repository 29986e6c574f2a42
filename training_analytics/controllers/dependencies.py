"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from training_analytics.repository.data_repository import DataRepository
from training_analytics.services.analytics_service import AnalyticsEngine
from training_analytics.services.dashboard_service import DashboardWorkflowService
from training_analytics.utils.config import get_settings


def get_analytics_engine(request: Request) -> AnalyticsEngine:
    engine = getattr(request.app.state, "analytics_engine", None)
    if engine is None:
        engine = AnalyticsEngine(settings=get_settings())
        request.app.state.analytics_engine = engine
    return engine


def get_repository(request: Request) -> DataRepository:
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Record repository is not initialized",
        )
    return repository


def get_dashboard_service(request: Request) -> DashboardWorkflowService:
    service = getattr(request.app.state, "dashboard_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        if repository is not None:
            service = DashboardWorkflowService(
                repository=repository,
                engine=get_analytics_engine(request),
                settings=get_settings(),
            )
            request.app.state.dashboard_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dashboard service is not initialized",
        )
    return service
