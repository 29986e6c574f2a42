"""HTTP controller layer for the predictive analytics engine."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from training_analytics.controllers.dependencies import get_analytics_engine, get_dashboard_service
from training_analytics.domain.models import CentreRecord, CourseRecord, TraineeRecord
from training_analytics.services.analytics_service import AnalyticsEngine
from training_analytics.services.dashboard_service import (
    DashboardValidationError,
    DashboardWorkflowService,
)
from training_analytics.utils.config import get_settings
from training_analytics.utils.logger import get_logger


logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["analytics"])


class TraineePayload(BaseModel):
    """Trainee snapshot row. Categorical values are free text."""

    trainee_id: int
    name: str
    age: Optional[int] = None
    gender: Optional[str] = None
    employment: Optional[str] = None
    education: Optional[str] = None
    course_id: Optional[int] = None
    centre_name: str = ""
    lga: str = ""
    cohort_number: int = 1
    enrolled_at: Optional[str] = None
    passed: bool = False
    failed: bool = False
    not_sat_for_exams: bool = False
    dropout: bool = False


class CentrePayload(BaseModel):
    centre_id: int
    centre_name: str
    lga: str = ""
    declared_capacity: int = Field(default=0, ge=0)
    usable_capacity: int = Field(default=0, ge=0)
    computers_present: int = Field(default=0, ge=0)
    computers_functional: int = Field(default=0, ge=0)
    power_available: bool = False
    internet_available: bool = False


class CoursePayload(BaseModel):
    course_id: int
    title: str


class SnapshotRequest(BaseModel):
    trainees: list[TraineePayload] = Field(default_factory=list)
    centres: list[CentrePayload] = Field(default_factory=list)
    courses: list[CoursePayload] = Field(default_factory=list)
    horizon_months: int = Field(
        default=settings.forecast_default_horizon_months,
        ge=1,
        le=settings.forecast_max_horizon_months,
    )


class ResourceDemandRequest(SnapshotRequest):
    horizon_months: int = Field(
        default=settings.resource_default_horizon_months,
        ge=1,
        le=settings.forecast_max_horizon_months,
    )


class EnrollmentForecastResponse(BaseModel):
    period: str
    predicted_enrollment: int = Field(ge=0)
    confidence: float = Field(ge=0.0, le=1.0)
    trend: str
    factors: list[str]


class DropoutRiskResponse(BaseModel):
    trainee_id: int
    trainee_name: str
    risk_level: str
    risk_score: int = Field(ge=0, le=100)
    risk_factors: list[str]
    recommendations: list[str]
    last_assessment: datetime


class ResourceDemandResponse(BaseModel):
    resource_type: str
    current_demand: int = Field(ge=0)
    predicted_demand: int = Field(ge=0)
    confidence: float = Field(ge=0.0, le=1.0)
    period: str
    recommendations: list[str]


class PerformanceOptimizationResponse(BaseModel):
    metric: str
    current_value: float
    target_value: float
    improvement: float
    recommendations: list[str]
    priority: str


class PredictiveMetricsResponse(BaseModel):
    enrollment_forecast: list[EnrollmentForecastResponse]
    dropout_risks: list[DropoutRiskResponse]
    resource_demand: list[ResourceDemandResponse]
    performance_optimization: list[PerformanceOptimizationResponse]


def _to_records(
    payload: SnapshotRequest,
) -> tuple[list[TraineeRecord], list[CentreRecord], list[CourseRecord]]:
    return (
        [TraineeRecord(**item.model_dump()) for item in payload.trainees],
        [CentreRecord(**item.model_dump()) for item in payload.centres],
        [CourseRecord(**item.model_dump()) for item in payload.courses],
    )


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    return {"status": "ok", "version": settings.app_version}


@router.post(
    "/forecast_enrollment",
    response_model=list[EnrollmentForecastResponse],
    status_code=status.HTTP_200_OK,
)
async def forecast_enrollment(
    payload: SnapshotRequest,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
) -> list[EnrollmentForecastResponse]:
    trainees, centres, courses = _to_records(payload)
    forecasts = engine.forecast_enrollment(trainees, centres, courses, payload.horizon_months)
    return [EnrollmentForecastResponse(**item.to_dict()) for item in forecasts]


@router.post(
    "/assess_dropout_risk",
    response_model=list[DropoutRiskResponse],
    status_code=status.HTTP_200_OK,
)
async def assess_dropout_risk(
    payload: SnapshotRequest,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
) -> list[DropoutRiskResponse]:
    trainees, _, courses = _to_records(payload)
    assessments = engine.assess_dropout_risk(trainees, courses)
    return [DropoutRiskResponse(**item.to_dict()) for item in assessments]


@router.post(
    "/predict_resource_demand",
    response_model=list[ResourceDemandResponse],
    status_code=status.HTTP_200_OK,
)
async def predict_resource_demand(
    payload: ResourceDemandRequest,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
) -> list[ResourceDemandResponse]:
    trainees, centres, _ = _to_records(payload)
    predictions = engine.predict_resource_demand(trainees, centres, payload.horizon_months)
    return [ResourceDemandResponse(**item.to_dict()) for item in predictions]


@router.post(
    "/optimization_targets",
    response_model=list[PerformanceOptimizationResponse],
    status_code=status.HTTP_200_OK,
)
async def optimization_targets(
    payload: SnapshotRequest,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
) -> list[PerformanceOptimizationResponse]:
    trainees, centres, courses = _to_records(payload)
    targets = engine.compute_optimization_targets(trainees, centres, courses)
    return [PerformanceOptimizationResponse(**item.to_dict()) for item in targets]


@router.get(
    "/predictive_metrics",
    response_model=PredictiveMetricsResponse,
    status_code=status.HTTP_200_OK,
)
async def predictive_metrics(
    horizon_months: Optional[int] = Query(default=None),
    resource_horizon_months: Optional[int] = Query(default=None),
    workflow_service: DashboardWorkflowService = Depends(get_dashboard_service),
) -> PredictiveMetricsResponse:
    """Run every engine operation over the stored records."""
    try:
        result = workflow_service.get_predictive_metrics(
            horizon_months=horizon_months,
            resource_horizon_months=resource_horizon_months,
        )
        return PredictiveMetricsResponse(**result)
    except DashboardValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected predictive metrics failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute predictive metrics",
        ) from exc
