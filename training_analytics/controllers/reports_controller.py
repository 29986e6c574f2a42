"""Weekly and monitoring & evaluation report submission."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, model_validator

from training_analytics.controllers.dependencies import get_repository
from training_analytics.domain.models import MEReportRecord, WeeklyReportRecord
from training_analytics.repository.data_repository import DataRepository, RecordConflictError
from training_analytics.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


class WeeklyReportRequest(BaseModel):
    centre_name: str = Field(min_length=1)
    technical_manager_name: str = Field(min_length=1)
    week_number: int = Field(ge=1, le=53)
    year: int = Field(ge=2000, le=9999)
    comments: str = ""
    trainees_enrolled: int = Field(default=0, ge=0)
    trainees_completed: int = Field(default=0, ge=0)
    trainees_dropped: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _outcomes_within_enrolled(self) -> "WeeklyReportRequest":
        if self.trainees_completed + self.trainees_dropped > self.trainees_enrolled:
            raise ValueError("completed + dropped cannot exceed enrolled")
        return self


class WeeklyReportResponse(WeeklyReportRequest):
    report_id: int
    created_at: Optional[str] = None


class MEReportRequest(BaseModel):
    centre_name: str = Field(min_length=1)
    technical_manager_name: str = Field(min_length=1)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=9999)
    comments: str = ""
    total_enrollment: int = Field(default=0, ge=0)
    total_completion: int = Field(default=0, ge=0)
    total_dropout: int = Field(default=0, ge=0)
    employment_rate: float = Field(default=0.0, ge=0.0, le=100.0)

    @model_validator(mode="after")
    def _outcomes_within_enrollment(self) -> "MEReportRequest":
        if self.total_completion + self.total_dropout > self.total_enrollment:
            raise ValueError("completion + dropout cannot exceed enrollment")
        return self


class MEReportResponse(MEReportRequest):
    report_id: int
    created_at: Optional[str] = None


@router.get("/weekly", response_model=list[WeeklyReportResponse])
async def list_weekly_reports(
    centre: Optional[str] = Query(default=None),
    repository: DataRepository = Depends(get_repository),
) -> list[WeeklyReportResponse]:
    return [WeeklyReportResponse(**vars(item)) for item in repository.list_weekly_reports(centre)]


@router.post(
    "/weekly",
    response_model=WeeklyReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_weekly_report(
    payload: WeeklyReportRequest,
    repository: DataRepository = Depends(get_repository),
) -> WeeklyReportResponse:
    try:
        created = repository.create_weekly_report(
            WeeklyReportRecord(report_id=0, **payload.model_dump())
        )
    except RecordConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    logger.info(
        "Weekly report submitted | centre=%s | week=%s | year=%s",
        created.centre_name,
        created.week_number,
        created.year,
    )
    return WeeklyReportResponse(**vars(created))


@router.get("/me", response_model=list[MEReportResponse])
async def list_me_reports(
    centre: Optional[str] = Query(default=None),
    repository: DataRepository = Depends(get_repository),
) -> list[MEReportResponse]:
    return [MEReportResponse(**vars(item)) for item in repository.list_me_reports(centre)]


@router.post(
    "/me",
    response_model=MEReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_me_report(
    payload: MEReportRequest,
    repository: DataRepository = Depends(get_repository),
) -> MEReportResponse:
    try:
        created = repository.create_me_report(MEReportRecord(report_id=0, **payload.model_dump()))
    except RecordConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    logger.info(
        "M&E report submitted | centre=%s | month=%s | year=%s",
        created.centre_name,
        created.month,
        created.year,
    )
    return MEReportResponse(**vars(created))
