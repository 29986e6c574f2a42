from __future__ import annotations

from dataclasses import replace

import pytest

from training_analytics.domain.models import (
    CentreRecord,
    InstructorRecord,
    MEReportRecord,
    TraineeRecord,
    WeeklyReportRecord,
)
from training_analytics.repository.data_repository import (
    DataRepository,
    RecordConflictError,
    RecordNotFoundError,
)
from training_analytics.utils.config import get_settings


def _build_repository(tmp_path, filename: str = "records.db", **overrides) -> DataRepository:
    settings = replace(get_settings(), database_path=tmp_path / filename, **overrides)
    repository = DataRepository(settings)
    repository.initialize_database()
    return repository


def test_seed_populates_empty_tables_once(tmp_path):
    repository = _build_repository(tmp_path, synthetic_trainee_count=40)

    assert repository.seed_synthetic_data() == 40
    assert repository.seed_synthetic_data() == 0

    courses = repository.list_courses()
    centres = repository.list_centres()
    trainees = repository.list_trainees()
    assert len(courses) == 4
    assert sum("Advanced" in course.title for course in courses) == 2
    assert [centre.centre_name for centre in centres] == [
        "Maiduguri Hub",
        "Jere Digital Centre",
        "Biu Skills Centre",
        "Konduga ICT Centre",
    ]
    assert len(trainees) == 40
    assert all(trainee.enrolled_at for trainee in trainees)
    assert {trainee.course_id for trainee in trainees} <= {course.course_id for course in courses}


def test_seed_is_deterministic_for_fixed_seed(tmp_path):
    first = _build_repository(tmp_path, "first.db", synthetic_trainee_count=25)
    second = _build_repository(tmp_path, "second.db", synthetic_trainee_count=25)
    first.seed_synthetic_data()
    second.seed_synthetic_data()

    def profile(repository):
        return [
            (item.name, item.age, item.gender, item.employment, item.education, item.course_id)
            for item in repository.list_trainees()
        ]

    assert profile(first) == profile(second)


def test_seed_skipped_when_user_records_exist(tmp_path):
    repository = _build_repository(tmp_path)
    repository.create_course("Computer Appreciation")

    assert repository.seed_synthetic_data() == 0
    assert repository.list_trainees() == []


def test_trainee_crud_round_trip(tmp_path):
    repository = _build_repository(tmp_path)
    course = repository.create_course("Advanced Networking")

    created = repository.create_trainee(
        TraineeRecord(
            trainee_id=0,
            name="Aisha Bello",
            age=19,
            gender="female",
            employment="unemployed",
            education="secondary",
            course_id=course.course_id,
            centre_name="Maiduguri Hub",
            lga="Maiduguri",
            cohort_number=2,
            enrolled_at="2026-01-15",
        )
    )
    assert created.trainee_id > 0
    assert repository.get_trainee(created.trainee_id) == created

    updated = repository.update_trainee(
        created.trainee_id,
        {"name": "Aisha B. Bello", "employment": "employed", "passed": True},
    )
    assert updated.name == "Aisha B. Bello"
    assert updated.employment == "employed"
    assert updated.passed is True
    assert updated.age == 19

    repository.delete_trainee(created.trainee_id)
    with pytest.raises(RecordNotFoundError):
        repository.get_trainee(created.trainee_id)


def test_trainee_with_unknown_course_is_rejected(tmp_path):
    repository = _build_repository(tmp_path)

    with pytest.raises(RecordConflictError):
        repository.create_trainee(TraineeRecord(trainee_id=0, name="Musa", course_id=999))


def test_centre_crud_and_name_conflict(tmp_path):
    repository = _build_repository(tmp_path)
    centre = repository.create_centre(
        CentreRecord(
            centre_id=0,
            centre_name="Biu Skills Centre",
            lga="Biu",
            declared_capacity=30,
            computers_functional=12,
            power_available=True,
        )
    )

    assert repository.list_centres() == [centre]
    assert centre.power_available is True
    assert centre.internet_available is False

    with pytest.raises(RecordConflictError):
        repository.create_centre(CentreRecord(centre_id=0, centre_name="Biu Skills Centre"))

    updated = repository.update_centre(centre.centre_id, {"internet_available": True})
    assert updated.internet_available is True

    repository.delete_centre(centre.centre_id)
    assert repository.list_centres() == []


def test_missing_rows_raise_not_found(tmp_path):
    repository = _build_repository(tmp_path)

    with pytest.raises(RecordNotFoundError):
        repository.get_centre(42)
    with pytest.raises(RecordNotFoundError):
        repository.update_trainee(42, {"age": 30})
    with pytest.raises(RecordNotFoundError):
        repository.delete_centre(42)


def test_update_with_unknown_field_is_rejected(tmp_path):
    repository = _build_repository(tmp_path)
    created = repository.create_trainee(TraineeRecord(trainee_id=0, name="Musa"))

    with pytest.raises(ValueError):
        repository.update_trainee(created.trainee_id, {"salary": 100})


def test_seed_assigns_one_active_instructor_per_centre(tmp_path):
    repository = _build_repository(tmp_path, synthetic_trainee_count=8)
    repository.seed_synthetic_data()

    instructors = repository.list_instructors()

    assert [item.centre_name for item in instructors] == [
        centre.centre_name for centre in repository.list_centres()
    ]
    assert {item.status for item in instructors} == {"active"}
    assert len(repository.list_instructors("maiduguri hub")) == 1


def test_course_update_and_delete(tmp_path):
    repository = _build_repository(tmp_path)
    course = repository.create_course("Web Basics")

    renamed = repository.update_course(course.course_id, "Web Development Fundamentals")
    assert renamed.title == "Web Development Fundamentals"

    repository.create_trainee(TraineeRecord(trainee_id=0, name="Musa", course_id=course.course_id))
    with pytest.raises(RecordConflictError):
        repository.delete_course(course.course_id)

    spare = repository.create_course("Spare")
    repository.delete_course(spare.course_id)
    assert [item.course_id for item in repository.list_courses()] == [course.course_id]

    with pytest.raises(RecordNotFoundError):
        repository.update_course(999, "Missing")
    with pytest.raises(RecordNotFoundError):
        repository.delete_course(999)


def test_instructor_crud_and_status_changes(tmp_path):
    repository = _build_repository(tmp_path)
    created = repository.create_instructor(
        InstructorRecord(
            instructor_id=0,
            name="Grace Okon",
            email="grace@example.org",
            lga="Jere",
            centre_name="Jere Digital Centre",
        )
    )

    assert created.status == "pending"
    assert repository.get_instructor(created.instructor_id) == created

    approved = repository.set_instructor_status(created.instructor_id, "approved")
    assert approved.status == "approved"

    moved = repository.update_instructor(created.instructor_id, {"centre_name": "Biu Skills Centre"})
    assert moved.centre_name == "Biu Skills Centre"
    assert moved.status == "approved"

    with pytest.raises(ValueError):
        repository.set_instructor_status(created.instructor_id, "suspended")
    with pytest.raises(RecordConflictError):
        repository.create_instructor(
            InstructorRecord(instructor_id=0, name="Other", email="grace@example.org")
        )

    repository.delete_instructor(created.instructor_id)
    with pytest.raises(RecordNotFoundError):
        repository.get_instructor(created.instructor_id)


def test_weekly_reports_are_listed_newest_first_and_unique_per_week(tmp_path):
    repository = _build_repository(tmp_path)
    for week in (3, 5):
        repository.create_weekly_report(
            WeeklyReportRecord(
                report_id=0,
                centre_name="Maiduguri Hub",
                technical_manager_name="Manager 1",
                week_number=week,
                year=2026,
                trainees_enrolled=20,
                trainees_completed=4,
                trainees_dropped=1,
            )
        )
    repository.create_weekly_report(
        WeeklyReportRecord(
            report_id=0,
            centre_name="Biu Skills Centre",
            technical_manager_name="Manager 3",
            week_number=5,
            year=2026,
        )
    )

    hub_reports = repository.list_weekly_reports("Maiduguri Hub")
    assert [item.week_number for item in hub_reports] == [5, 3]
    assert hub_reports[0].created_at is not None
    assert len(repository.list_weekly_reports()) == 3

    with pytest.raises(RecordConflictError):
        repository.create_weekly_report(
            WeeklyReportRecord(
                report_id=0,
                centre_name="Maiduguri Hub",
                technical_manager_name="Manager 1",
                week_number=5,
                year=2026,
            )
        )


def test_me_reports_round_trip(tmp_path):
    repository = _build_repository(tmp_path)

    created = repository.create_me_report(
        MEReportRecord(
            report_id=0,
            centre_name="Konduga ICT Centre",
            technical_manager_name="Manager 4",
            month=2,
            year=2026,
            comments="Generator repaired",
            total_enrollment=30,
            total_completion=18,
            total_dropout=3,
            employment_rate=42.5,
        )
    )

    assert created.report_id > 0
    assert repository.list_me_reports() == [created]
    assert repository.list_me_reports("Biu Skills Centre") == []

    with pytest.raises(RecordConflictError):
        repository.create_me_report(
            MEReportRecord(
                report_id=0,
                centre_name="Konduga ICT Centre",
                technical_manager_name="Manager 4",
                month=13,
                year=2026,
            )
        )
