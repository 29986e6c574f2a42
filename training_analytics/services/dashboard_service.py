"""Dashboard orchestration over stored records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Sequence

from training_analytics.domain.models import CentreRecord, CourseRecord, TraineeRecord
from training_analytics.repository.data_repository import DataRepository
from training_analytics.services.analytics_service import AnalyticsEngine
from training_analytics.services.export_service import ExportFilters, ExportResult, ExportService
from training_analytics.services.stats_service import StatsFilters, StatsService
from training_analytics.utils.config import Settings, get_settings
from training_analytics.utils.logger import get_logger


logger = get_logger(__name__)


class DashboardValidationError(Exception):
    """Raised when dashboard workflow inputs are invalid."""


@dataclass(frozen=True)
class RecordSnapshot:
    trainees: list[TraineeRecord]
    centres: list[CentreRecord]
    courses: list[CourseRecord]


class DashboardWorkflowService:
    """Loads a record snapshot and feeds it to the analytics services."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        engine: Optional[AnalyticsEngine] = None,
        stats_service: Optional[StatsService] = None,
        export_service: Optional[ExportService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._engine = engine or AnalyticsEngine(settings=self._settings)
        self._stats_service = stats_service or StatsService()
        self._export_service = export_service or ExportService()

    def load_snapshot(self) -> RecordSnapshot:
        return RecordSnapshot(
            trainees=self._repository.list_trainees(),
            centres=self._repository.list_centres(),
            courses=self._repository.list_courses(),
        )

    def _validate_horizon(self, name: str, value: Optional[int]) -> None:
        if value is None:
            return
        upper = self._settings.forecast_max_horizon_months
        if not 1 <= value <= upper:
            raise DashboardValidationError(f"{name} must be between 1 and {upper}")

    def get_predictive_metrics(
        self,
        *,
        horizon_months: Optional[int] = None,
        resource_horizon_months: Optional[int] = None,
        assessed_at: Optional[datetime] = None,
    ) -> dict[str, Any]:
        self._validate_horizon("horizon_months", horizon_months)
        self._validate_horizon("resource_horizon_months", resource_horizon_months)
        snapshot = self.load_snapshot()
        metrics = self._engine.compute_predictive_metrics(
            snapshot.trainees,
            snapshot.centres,
            snapshot.courses,
            horizon_months=horizon_months,
            resource_horizon_months=resource_horizon_months,
            assessed_at=assessed_at,
        )
        logger.info(
            "Predictive metrics served | trainees=%s | centres=%s | courses=%s",
            len(snapshot.trainees),
            len(snapshot.centres),
            len(snapshot.courses),
        )
        return metrics.to_dict()

    def get_stats_overview(
        self,
        filters: Optional[StatsFilters] = None,
        *,
        reference_year: Optional[int] = None,
    ) -> dict[str, Any]:
        snapshot = self.load_snapshot()
        return self._stats_service.compute_overview(
            snapshot.trainees,
            snapshot.centres,
            filters,
            instructors=self._repository.list_instructors(),
            courses=snapshot.courses,
            reference_year=reference_year,
        )

    def export_trainees(
        self,
        selected_fields: Sequence[str],
        filters: Optional[ExportFilters] = None,
        *,
        export_date: Optional[date] = None,
    ) -> ExportResult:
        return self._export_service.export_trainees_csv(
            self._repository.list_trainees(),
            selected_fields,
            filters,
            export_date=export_date,
        )
