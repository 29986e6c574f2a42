"""CSV export of trainee rows with field selection and filters."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Sequence

import pandas as pd

from training_analytics.domain.models import TraineeRecord
from training_analytics.services.stats_service import normalized_text, trainee_frame
from training_analytics.utils.logger import get_logger


logger = get_logger(__name__)


class ExportValidationError(ValueError):
    """Raised when an export request selects no or unknown fields."""


EXPORT_FIELDS: dict[str, str] = {
    "name": "Full Name",
    "gender": "Gender",
    "age": "Age",
    "employment": "Employment Status",
    "education": "Educational Background",
    "centre_name": "Centre",
    "lga": "LGA",
    "cohort_number": "Cohort",
    "enrolled_at": "Enrolled At",
    "passed": "Passed",
    "failed": "Failed",
    "not_sat_for_exams": "Not Sat For Exams",
    "dropout": "Dropout",
}

_BOOLEAN_FIELDS = frozenset({"passed", "failed", "not_sat_for_exams", "dropout"})
_GENDER_LABELS = {"m": "Male", "f": "Female"}


@dataclass(frozen=True)
class ExportFilters:
    centres: tuple[str, ...] = ()
    cohorts: tuple[int, ...] = ()
    genders: tuple[str, ...] = ()
    employment: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: str
    row_count: int


def _selects_all(values: Sequence[object]) -> bool:
    return not values or "all" in values


def _format_gender(value: object) -> str:
    if not isinstance(value, str) or not value:
        return ""
    return _GENDER_LABELS.get(value.strip().lower(), value)


def _format_value(field_id: str, value: object) -> object:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if field_id == "centre_name":
        return str(value).upper()
    if field_id == "gender":
        return _format_gender(value)
    if field_id in _BOOLEAN_FIELDS:
        return "Yes" if value else "No"
    # Optional integer columns come back from pandas as floats.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def build_export_filename(filters: ExportFilters, export_date: date) -> str:
    filename = f"trainees_export_{export_date.isoformat()}"
    if not _selects_all(filters.centres):
        filename += f"_centres_{len(filters.centres)}"
    if not _selects_all(filters.cohorts):
        filename += "_cohorts_" + "_".join(str(cohort) for cohort in filters.cohorts)
    if not _selects_all(filters.genders):
        filename += "_genders_" + "_".join(filters.genders)
    return f"{filename}.csv"


class ExportService:
    """Turns trainee records into a downloadable CSV document."""

    def export_trainees_csv(
        self,
        trainees: Sequence[TraineeRecord],
        selected_fields: Sequence[str],
        filters: Optional[ExportFilters] = None,
        *,
        export_date: Optional[date] = None,
    ) -> ExportResult:
        if not selected_fields:
            raise ExportValidationError("Select at least one field to export")
        unknown = [field_id for field_id in selected_fields if field_id not in EXPORT_FIELDS]
        if unknown:
            raise ExportValidationError(f"Unknown export fields: {', '.join(unknown)}")

        selected_fields = list(dict.fromkeys(selected_fields))
        active_filters = filters or ExportFilters()
        frame = trainee_frame(trainees)

        if not _selects_all(active_filters.centres):
            wanted = {centre.strip().lower() for centre in active_filters.centres}
            frame = frame[normalized_text(frame["centre_name"]).isin(wanted)]
        if not _selects_all(active_filters.cohorts):
            frame = frame[frame["cohort_number"].isin(list(active_filters.cohorts))]
        if not _selects_all(active_filters.genders):
            wanted = {gender.strip().lower() for gender in active_filters.genders}
            frame = frame[normalized_text(frame["gender"]).isin(wanted)]
        if not _selects_all(active_filters.employment):
            wanted = {status.strip().lower() for status in active_filters.employment}
            frame = frame[normalized_text(frame["employment"]).isin(wanted)]

        output = pd.DataFrame(
            {
                EXPORT_FIELDS[field_id]: [_format_value(field_id, value) for value in frame[field_id]]
                for field_id in selected_fields
            },
            columns=[EXPORT_FIELDS[field_id] for field_id in selected_fields],
        )
        result = ExportResult(
            filename=build_export_filename(
                active_filters,
                export_date or datetime.now(timezone.utc).date(),
            ),
            content=output.to_csv(index=False),
            row_count=len(output),
        )
        logger.info(
            "Trainee export generated | rows=%s | fields=%s | filename=%s",
            result.row_count,
            len(selected_fields),
            result.filename,
        )
        return result
