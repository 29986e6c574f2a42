"""Descriptive statistics for the admin overview."""

from __future__ import annotations

import calendar
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import pandas as pd

from training_analytics.domain.models import (
    CentreRecord,
    CourseRecord,
    InstructorRecord,
    TraineeRecord,
)
from training_analytics.utils.logger import get_logger
from training_analytics.utils.timestamps import calendar_month


logger = get_logger(__name__)

_TRAINEE_FIELDS = [item.name for item in fields(TraineeRecord)]

MALE_ALIASES = frozenset({"male", "m"})
FEMALE_ALIASES = frozenset({"female", "f"})
EMPLOYED_ALIASES = frozenset({"employed", "emp"})
UNEMPLOYED_ALIASES = frozenset({"unemployed", "unemp"})


@dataclass(frozen=True)
class StatsFilters:
    centre: str = "all"
    lga: str = "all"
    search: str = ""


def trainee_frame(trainees: Sequence[TraineeRecord]) -> pd.DataFrame:
    """Tabulate trainee records; an empty input keeps the full column set."""
    return pd.DataFrame([asdict(trainee) for trainee in trainees], columns=_TRAINEE_FIELDS)


def normalized_text(series: pd.Series) -> pd.Series:
    return series.fillna("").astype(str).str.strip().str.lower()


def apply_filters(frame: pd.DataFrame, filters: StatsFilters) -> pd.DataFrame:
    filtered = frame
    if filters.centre.lower() != "all":
        filtered = filtered[normalized_text(filtered["centre_name"]) == filters.centre.strip().lower()]
    if filters.lga.lower() != "all":
        filtered = filtered[normalized_text(filtered["lga"]) == filters.lga.strip().lower()]
    search = filters.search.strip().lower()
    if search:
        mask = (
            normalized_text(filtered["name"]).str.contains(search, regex=False)
            | normalized_text(filtered["centre_name"]).str.contains(search, regex=False)
            | normalized_text(filtered["lga"]).str.contains(search, regex=False)
        )
        filtered = filtered[mask]
    return filtered


def _flag_count(frame: pd.DataFrame, column: str) -> int:
    return int(frame[column].fillna(False).astype(bool).sum())


class StatsService:
    """Aggregates headline counts, distributions and monthly trends."""

    def compute_overview(
        self,
        trainees: Sequence[TraineeRecord],
        centres: Sequence[CentreRecord],
        filters: Optional[StatsFilters] = None,
        *,
        instructors: Sequence[InstructorRecord] = (),
        courses: Sequence[CourseRecord] = (),
        reference_year: Optional[int] = None,
    ) -> dict[str, Any]:
        active_filters = filters or StatsFilters()
        year = reference_year or datetime.now(timezone.utc).year
        frame = apply_filters(trainee_frame(trainees), active_filters)

        genders = normalized_text(frame["gender"])
        employment = normalized_text(frame["employment"])
        flags = frame[["passed", "failed", "not_sat_for_exams", "dropout"]].fillna(False).astype(bool)

        overview = {
            "total_trainees": int(len(frame)),
            "total_centres": len(centres),
            "total_instructors": len(instructors),
            "total_courses": len(courses),
            "gender_distribution": {
                "male": int(genders.isin(MALE_ALIASES).sum()),
                "female": int(genders.isin(FEMALE_ALIASES).sum()),
            },
            "employment_stats": {
                "employed": int(employment.isin(EMPLOYED_ALIASES).sum()),
                "unemployed": int(employment.isin(UNEMPLOYED_ALIASES).sum()),
            },
            "exam_results": {
                "passed": _flag_count(frame, "passed"),
                "failed": _flag_count(frame, "failed"),
                "not_sat": _flag_count(frame, "not_sat_for_exams"),
                "dropout": _flag_count(frame, "dropout"),
                "enrolled": int((~flags.any(axis=1)).sum()),
            },
            "centre_performance": self._centre_performance(frame, centres),
            "monthly_trends": self._monthly_trends(frame, year),
        }
        logger.info(
            "Stats overview computed | trainees=%s | centres=%s | year=%s",
            overview["total_trainees"],
            overview["total_centres"],
            year,
        )
        return overview

    @staticmethod
    def _centre_performance(
        frame: pd.DataFrame,
        centres: Sequence[CentreRecord],
    ) -> list[dict[str, Any]]:
        per_centre = normalized_text(frame["centre_name"]).value_counts()
        rows: list[dict[str, Any]] = []
        for centre in centres:
            trainee_count = int(per_centre.get(centre.centre_name.strip().lower(), 0))
            if trainee_count == 0:
                continue
            rows.append(
                {
                    "name": centre.centre_name or "Unknown Centre",
                    "trainees": trainee_count,
                    "operational": (
                        "Operational"
                        if centre.power_available and centre.internet_available
                        else "Limited"
                    ),
                    "capacity": centre.declared_capacity,
                    "computers": centre.computers_functional,
                }
            )
        return rows

    @staticmethod
    def _monthly_trends(frame: pd.DataFrame, year: int) -> list[dict[str, Any]]:
        months = [calendar_month(value) for value in frame["enrolled_at"]]
        in_year_mask = [month is not None and month.year == year for month in months]
        in_year = frame.loc[in_year_mask].assign(
            month=[month.month for month, keep in zip(months, in_year_mask) if keep]
        )
        grouped = in_year.groupby("month").agg(
            enrolled=("trainee_id", "size"),
            completed=("passed", lambda column: int(column.astype(bool).sum())),
            dropped=("dropout", lambda column: int(column.astype(bool).sum())),
        )

        trends: list[dict[str, Any]] = []
        for month in range(1, 13):
            if month in grouped.index:
                row = grouped.loc[month]
                enrolled, completed, dropped = (
                    int(row["enrolled"]),
                    int(row["completed"]),
                    int(row["dropped"]),
                )
            else:
                enrolled = completed = dropped = 0
            trends.append(
                {
                    "month": calendar.month_abbr[month],
                    "enrolled": enrolled,
                    "completed": completed,
                    "dropped": dropped,
                }
            )
        return trends
