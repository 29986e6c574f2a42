"""Controller layer for trainee/centre/course/instructor records, statistics and export."""

from __future__ import annotations

from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from training_analytics.controllers.analytics_controller import (
    CentrePayload,
    CoursePayload,
    TraineePayload,
)
from training_analytics.controllers.dependencies import get_dashboard_service, get_repository
from training_analytics.domain.models import CentreRecord, InstructorRecord, TraineeRecord
from training_analytics.repository.data_repository import (
    DataRepository,
    RecordConflictError,
    RecordNotFoundError,
)
from training_analytics.services.dashboard_service import DashboardWorkflowService
from training_analytics.services.export_service import ExportFilters, ExportValidationError
from training_analytics.services.stats_service import StatsFilters
from training_analytics.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["records"])


class TraineeCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    age: Optional[int] = Field(default=None, ge=0, le=120)
    gender: Optional[str] = None
    employment: Optional[str] = None
    education: Optional[str] = None
    course_id: Optional[int] = Field(default=None, gt=0)
    centre_name: str = ""
    lga: str = ""
    cohort_number: int = Field(default=1, ge=1)
    enrolled_at: Optional[str] = None
    passed: bool = False
    failed: bool = False
    not_sat_for_exams: bool = False
    dropout: bool = False


class TraineeUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    age: Optional[int] = Field(default=None, ge=0, le=120)
    gender: Optional[str] = None
    employment: Optional[str] = None
    education: Optional[str] = None
    course_id: Optional[int] = Field(default=None, gt=0)
    centre_name: Optional[str] = None
    lga: Optional[str] = None
    cohort_number: Optional[int] = Field(default=None, ge=1)
    enrolled_at: Optional[str] = None
    passed: Optional[bool] = None
    failed: Optional[bool] = None
    not_sat_for_exams: Optional[bool] = None
    dropout: Optional[bool] = None


class CentreCreateRequest(BaseModel):
    centre_name: str = Field(min_length=1)
    lga: str = ""
    declared_capacity: int = Field(default=0, ge=0)
    usable_capacity: int = Field(default=0, ge=0)
    computers_present: int = Field(default=0, ge=0)
    computers_functional: int = Field(default=0, ge=0)
    power_available: bool = False
    internet_available: bool = False


class CentreUpdateRequest(BaseModel):
    centre_name: Optional[str] = Field(default=None, min_length=1)
    lga: Optional[str] = None
    declared_capacity: Optional[int] = Field(default=None, ge=0)
    usable_capacity: Optional[int] = Field(default=None, ge=0)
    computers_present: Optional[int] = Field(default=None, ge=0)
    computers_functional: Optional[int] = Field(default=None, ge=0)
    power_available: Optional[bool] = None
    internet_available: Optional[bool] = None


class CourseCreateRequest(BaseModel):
    title: str = Field(min_length=1)


InstructorStatus = Literal["pending", "approved", "revoked", "active"]


class InstructorPayload(BaseModel):
    instructor_id: int
    name: str
    email: str
    lga: str = ""
    technical_manager_name: str = ""
    phone_number: str = ""
    centre_name: str = ""
    status: InstructorStatus = "pending"


class InstructorCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    lga: str = ""
    technical_manager_name: str = ""
    phone_number: str = ""
    centre_name: str = ""
    status: InstructorStatus = "pending"


class InstructorUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    lga: Optional[str] = None
    technical_manager_name: Optional[str] = None
    phone_number: Optional[str] = None
    centre_name: Optional[str] = None
    status: Optional[InstructorStatus] = None


def _not_found(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _conflict(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


# --- Trainees ---


@router.get("/trainees", response_model=list[TraineePayload])
async def list_trainees(
    repository: DataRepository = Depends(get_repository),
) -> list[TraineePayload]:
    return [TraineePayload(**vars(item)) for item in repository.list_trainees()]


@router.get("/trainees/{trainee_id}", response_model=TraineePayload)
async def get_trainee(
    trainee_id: int,
    repository: DataRepository = Depends(get_repository),
) -> TraineePayload:
    try:
        return TraineePayload(**vars(repository.get_trainee(trainee_id)))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/trainees", response_model=TraineePayload, status_code=status.HTTP_201_CREATED)
async def create_trainee(
    payload: TraineeCreateRequest,
    repository: DataRepository = Depends(get_repository),
) -> TraineePayload:
    try:
        created = repository.create_trainee(TraineeRecord(trainee_id=0, **payload.model_dump()))
        logger.info("Trainee created | trainee_id=%s", created.trainee_id)
        return TraineePayload(**vars(created))
    except RecordConflictError as exc:
        raise _conflict(exc) from exc


@router.put("/trainees/{trainee_id}", response_model=TraineePayload)
async def update_trainee(
    trainee_id: int,
    payload: TraineeUpdateRequest,
    repository: DataRepository = Depends(get_repository),
) -> TraineePayload:
    try:
        updated = repository.update_trainee(trainee_id, payload.model_dump(exclude_unset=True))
        return TraineePayload(**vars(updated))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    except RecordConflictError as exc:
        raise _conflict(exc) from exc


@router.delete("/trainees/{trainee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trainee(
    trainee_id: int,
    repository: DataRepository = Depends(get_repository),
) -> Response:
    try:
        repository.delete_trainee(trainee_id)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Centres ---


@router.get("/centres", response_model=list[CentrePayload])
async def list_centres(
    repository: DataRepository = Depends(get_repository),
) -> list[CentrePayload]:
    return [CentrePayload(**vars(item)) for item in repository.list_centres()]


@router.get("/centres/{centre_id}", response_model=CentrePayload)
async def get_centre(
    centre_id: int,
    repository: DataRepository = Depends(get_repository),
) -> CentrePayload:
    try:
        return CentrePayload(**vars(repository.get_centre(centre_id)))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/centres", response_model=CentrePayload, status_code=status.HTTP_201_CREATED)
async def create_centre(
    payload: CentreCreateRequest,
    repository: DataRepository = Depends(get_repository),
) -> CentrePayload:
    try:
        created = repository.create_centre(CentreRecord(centre_id=0, **payload.model_dump()))
        logger.info("Centre created | centre_id=%s", created.centre_id)
        return CentrePayload(**vars(created))
    except RecordConflictError as exc:
        raise _conflict(exc) from exc


@router.put("/centres/{centre_id}", response_model=CentrePayload)
async def update_centre(
    centre_id: int,
    payload: CentreUpdateRequest,
    repository: DataRepository = Depends(get_repository),
) -> CentrePayload:
    try:
        updated = repository.update_centre(centre_id, payload.model_dump(exclude_unset=True))
        return CentrePayload(**vars(updated))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    except RecordConflictError as exc:
        raise _conflict(exc) from exc


@router.delete("/centres/{centre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_centre(
    centre_id: int,
    repository: DataRepository = Depends(get_repository),
) -> Response:
    try:
        repository.delete_centre(centre_id)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Courses ---


@router.get("/courses", response_model=list[CoursePayload])
async def list_courses(
    repository: DataRepository = Depends(get_repository),
) -> list[CoursePayload]:
    return [CoursePayload(**vars(item)) for item in repository.list_courses()]


@router.post("/courses", response_model=CoursePayload, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreateRequest,
    repository: DataRepository = Depends(get_repository),
) -> CoursePayload:
    return CoursePayload(**vars(repository.create_course(payload.title)))


@router.put("/courses/{course_id}", response_model=CoursePayload)
async def update_course(
    course_id: int,
    payload: CourseCreateRequest,
    repository: DataRepository = Depends(get_repository),
) -> CoursePayload:
    try:
        return CoursePayload(**vars(repository.update_course(course_id, payload.title)))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc


@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: int,
    repository: DataRepository = Depends(get_repository),
) -> Response:
    try:
        repository.delete_course(course_id)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    except RecordConflictError as exc:
        raise _conflict(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Instructors ---


@router.get("/instructors", response_model=list[InstructorPayload])
async def list_instructors(
    centre: Optional[str] = Query(default=None),
    repository: DataRepository = Depends(get_repository),
) -> list[InstructorPayload]:
    return [InstructorPayload(**vars(item)) for item in repository.list_instructors(centre)]


@router.get("/instructors/{instructor_id}", response_model=InstructorPayload)
async def get_instructor(
    instructor_id: int,
    repository: DataRepository = Depends(get_repository),
) -> InstructorPayload:
    try:
        return InstructorPayload(**vars(repository.get_instructor(instructor_id)))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post(
    "/instructors",
    response_model=InstructorPayload,
    status_code=status.HTTP_201_CREATED,
)
async def create_instructor(
    payload: InstructorCreateRequest,
    repository: DataRepository = Depends(get_repository),
) -> InstructorPayload:
    try:
        created = repository.create_instructor(
            InstructorRecord(instructor_id=0, **payload.model_dump())
        )
        logger.info("Instructor created | instructor_id=%s", created.instructor_id)
        return InstructorPayload(**vars(created))
    except RecordConflictError as exc:
        raise _conflict(exc) from exc


@router.put("/instructors/{instructor_id}", response_model=InstructorPayload)
async def update_instructor(
    instructor_id: int,
    payload: InstructorUpdateRequest,
    repository: DataRepository = Depends(get_repository),
) -> InstructorPayload:
    try:
        updated = repository.update_instructor(
            instructor_id, payload.model_dump(exclude_unset=True)
        )
        return InstructorPayload(**vars(updated))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    except RecordConflictError as exc:
        raise _conflict(exc) from exc


@router.post("/instructors/{instructor_id}/approve", response_model=InstructorPayload)
async def approve_instructor(
    instructor_id: int,
    repository: DataRepository = Depends(get_repository),
) -> InstructorPayload:
    try:
        return InstructorPayload(**vars(repository.set_instructor_status(instructor_id, "approved")))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/instructors/{instructor_id}/revoke", response_model=InstructorPayload)
async def revoke_instructor(
    instructor_id: int,
    repository: DataRepository = Depends(get_repository),
) -> InstructorPayload:
    try:
        return InstructorPayload(**vars(repository.set_instructor_status(instructor_id, "revoked")))
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc


@router.delete("/instructors/{instructor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_instructor(
    instructor_id: int,
    repository: DataRepository = Depends(get_repository),
) -> Response:
    try:
        repository.delete_instructor(instructor_id)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Statistics and export ---


@router.get("/stats", status_code=status.HTTP_200_OK)
async def stats_overview(
    centre: str = Query(default="all"),
    lga: str = Query(default="all"),
    search: str = Query(default=""),
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    workflow_service: DashboardWorkflowService = Depends(get_dashboard_service),
) -> dict[str, Any]:
    try:
        return workflow_service.get_stats_overview(
            StatsFilters(centre=centre, lga=lga, search=search),
            reference_year=year,
        )
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected stats overview failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute statistics",
        ) from exc


@router.get("/export/trainees.csv", status_code=status.HTTP_200_OK)
async def export_trainees(
    fields: list[str] = Query(default=[]),
    centre: list[str] = Query(default=[]),
    cohort: list[int] = Query(default=[]),
    gender: list[str] = Query(default=[]),
    employment: list[str] = Query(default=[]),
    workflow_service: DashboardWorkflowService = Depends(get_dashboard_service),
) -> Response:
    try:
        result = workflow_service.export_trainees(
            fields,
            ExportFilters(
                centres=tuple(centre),
                cohorts=tuple(cohort),
                genders=tuple(gender),
                employment=tuple(employment),
            ),
        )
    except ExportValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return Response(
        content=result.content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
