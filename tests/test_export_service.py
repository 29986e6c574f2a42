from __future__ import annotations

import csv
import io
from datetime import date

import pytest

from training_analytics.domain.models import TraineeRecord
from training_analytics.services.export_service import (
    ExportFilters,
    ExportService,
    ExportValidationError,
    build_export_filename,
)


EXPORT_DATE = date(2026, 3, 1)

TRAINEES = [
    TraineeRecord(
        trainee_id=1,
        name="Aisha Bello",
        age=19,
        gender="f",
        employment="unemployed",
        centre_name="Maiduguri Hub",
        cohort_number=1,
        passed=True,
    ),
    TraineeRecord(
        trainee_id=2,
        name="Musa Ibrahim",
        age=None,
        gender="male",
        employment="employed",
        centre_name="Biu Skills Centre",
        cohort_number=2,
    ),
    TraineeRecord(
        trainee_id=3,
        name="Fatima Ali",
        age=27,
        gender="female",
        employment="employed",
        centre_name="Biu Skills Centre",
        cohort_number=3,
        dropout=True,
    ),
]


def _rows(content: str) -> list[dict[str, str]]:
    return list(csv.DictReader(io.StringIO(content)))


def test_export_formats_selected_columns():
    result = ExportService().export_trainees_csv(
        TRAINEES,
        ["name", "gender", "age", "centre_name", "passed"],
        export_date=EXPORT_DATE,
    )

    rows = _rows(result.content)
    assert result.row_count == 3
    assert result.filename == "trainees_export_2026-03-01.csv"
    assert list(rows[0]) == ["Full Name", "Gender", "Age", "Centre", "Passed"]
    assert rows[0] == {
        "Full Name": "Aisha Bello",
        "Gender": "Female",
        "Age": "19",
        "Centre": "MAIDUGURI HUB",
        "Passed": "Yes",
    }
    assert rows[1]["Age"] == ""
    assert rows[1]["Passed"] == "No"


def test_export_applies_filters_and_names_file_after_them():
    filters = ExportFilters(
        centres=("biu skills centre",),
        cohorts=(2, 3),
        genders=("female",),
    )

    result = ExportService().export_trainees_csv(
        TRAINEES,
        ["name", "cohort_number", "dropout"],
        filters,
        export_date=EXPORT_DATE,
    )

    assert _rows(result.content) == [{"Full Name": "Fatima Ali", "Cohort": "3", "Dropout": "Yes"}]
    assert result.filename == (
        "trainees_export_2026-03-01_centres_1_cohorts_2_3_genders_female.csv"
    )


def test_all_selector_disables_filter():
    filters = ExportFilters(centres=("all",), employment=("all",))

    assert build_export_filename(filters, EXPORT_DATE) == "trainees_export_2026-03-01.csv"
    result = ExportService().export_trainees_csv(TRAINEES, ["name"], filters, export_date=EXPORT_DATE)
    assert result.row_count == 3


def test_duplicate_fields_are_exported_once():
    result = ExportService().export_trainees_csv(
        TRAINEES, ["name", "name", "lga"], export_date=EXPORT_DATE
    )

    assert result.content.splitlines()[0] == "Full Name,LGA"


def test_export_requires_known_fields():
    service = ExportService()

    with pytest.raises(ExportValidationError):
        service.export_trainees_csv(TRAINEES, [])
    with pytest.raises(ExportValidationError):
        service.export_trainees_csv(TRAINEES, ["name", "salary"])


def test_export_of_empty_selection_keeps_header():
    result = ExportService().export_trainees_csv(
        TRAINEES,
        ["name", "gender"],
        ExportFilters(employment=("self-employed",)),
        export_date=EXPORT_DATE,
    )

    assert result.row_count == 0
    assert result.content.splitlines() == ["Full Name,Gender"]
