"""Repository layer responsible for all database access."""

from __future__ import annotations

import random
import sqlite3
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from training_analytics.domain.models import (
    INSTRUCTOR_STATUSES,
    CentreRecord,
    CourseRecord,
    InstructorRecord,
    MEReportRecord,
    TraineeRecord,
    WeeklyReportRecord,
)
from training_analytics.utils.config import Settings, get_settings
from training_analytics.utils.logger import get_logger


logger = get_logger(__name__)

ReportT = TypeVar("ReportT", WeeklyReportRecord, MEReportRecord)


class RecordNotFoundError(Exception):
    """Raised when a requested row does not exist."""


class RecordConflictError(Exception):
    """Raised when a write violates a uniqueness or reference constraint."""


_TRAINEE_COLUMNS = (
    "full_name",
    "age",
    "gender",
    "employment_status",
    "educational_background",
    "course_id",
    "centre_name",
    "lga",
    "cohort_number",
    "enrolled_at",
    "passed",
    "failed",
    "not_sat_for_exams",
    "dropout",
)

_CENTRE_COLUMNS = (
    "centre_name",
    "lga",
    "declared_capacity",
    "usable_capacity",
    "computers_present",
    "computers_functional",
    "power_available",
    "internet_available",
)

_INSTRUCTOR_COLUMNS = (
    "name",
    "email",
    "lga",
    "technical_manager_name",
    "phone_number",
    "centre_name",
    "status",
)

_WEEKLY_REPORT_COLUMNS = (
    "centre_name",
    "technical_manager_name",
    "week_number",
    "year",
    "comments",
    "trainees_enrolled",
    "trainees_completed",
    "trainees_dropped",
)

_ME_REPORT_COLUMNS = (
    "centre_name",
    "technical_manager_name",
    "month",
    "year",
    "comments",
    "total_enrollment",
    "total_completion",
    "total_dropout",
    "employment_rate",
)

# Record attribute -> Trainees column, where the names differ.
_TRAINEE_FIELD_TO_COLUMN = {
    "name": "full_name",
    "employment": "employment_status",
    "education": "educational_background",
}


def _trainee_from_row(row: sqlite3.Row) -> TraineeRecord:
    return TraineeRecord(
        trainee_id=int(row["id"]),
        name=str(row["full_name"]),
        age=None if row["age"] is None else int(row["age"]),
        gender=row["gender"],
        employment=row["employment_status"],
        education=row["educational_background"],
        course_id=None if row["course_id"] is None else int(row["course_id"]),
        centre_name=str(row["centre_name"] or ""),
        lga=str(row["lga"] or ""),
        cohort_number=int(row["cohort_number"]),
        enrolled_at=row["enrolled_at"],
        passed=bool(row["passed"]),
        failed=bool(row["failed"]),
        not_sat_for_exams=bool(row["not_sat_for_exams"]),
        dropout=bool(row["dropout"]),
    )


def _centre_from_row(row: sqlite3.Row) -> CentreRecord:
    return CentreRecord(
        centre_id=int(row["id"]),
        centre_name=str(row["centre_name"]),
        lga=str(row["lga"] or ""),
        declared_capacity=int(row["declared_capacity"]),
        usable_capacity=int(row["usable_capacity"]),
        computers_present=int(row["computers_present"]),
        computers_functional=int(row["computers_functional"]),
        power_available=bool(row["power_available"]),
        internet_available=bool(row["internet_available"]),
    )


def _instructor_from_row(row: sqlite3.Row) -> InstructorRecord:
    return InstructorRecord(
        instructor_id=int(row["id"]),
        name=str(row["name"]),
        email=str(row["email"]),
        lga=str(row["lga"] or ""),
        technical_manager_name=str(row["technical_manager_name"] or ""),
        phone_number=str(row["phone_number"] or ""),
        centre_name=str(row["centre_name"] or ""),
        status=str(row["status"]),
    )


def _weekly_report_from_row(row: sqlite3.Row) -> WeeklyReportRecord:
    return WeeklyReportRecord(
        report_id=int(row["id"]),
        centre_name=str(row["centre_name"]),
        technical_manager_name=str(row["technical_manager_name"]),
        week_number=int(row["week_number"]),
        year=int(row["year"]),
        comments=str(row["comments"] or ""),
        trainees_enrolled=int(row["trainees_enrolled"]),
        trainees_completed=int(row["trainees_completed"]),
        trainees_dropped=int(row["trainees_dropped"]),
        created_at=row["created_at"],
    )


def _me_report_from_row(row: sqlite3.Row) -> MEReportRecord:
    return MEReportRecord(
        report_id=int(row["id"]),
        centre_name=str(row["centre_name"]),
        technical_manager_name=str(row["technical_manager_name"]),
        month=int(row["month"]),
        year=int(row["year"]),
        comments=str(row["comments"] or ""),
        total_enrollment=int(row["total_enrollment"]),
        total_completion=int(row["total_completion"]),
        total_dropout=int(row["total_dropout"]),
        employment_rate=float(row["employment_rate"]),
        created_at=row["created_at"],
    )


def _validate_instructor_status(status: str) -> None:
    if status not in INSTRUCTOR_STATUSES:
        raise ValueError(
            f"unknown instructor status '{status}'; expected one of {list(INSTRUCTOR_STATUSES)}"
        )


def _trainee_values(trainee: TraineeRecord) -> dict[str, Any]:
    values = asdict(trainee)
    values.pop("trainee_id")
    return {_TRAINEE_FIELD_TO_COLUMN.get(key, key): value for key, value in values.items()}


class DataRepository:
    """Encapsulates SQLite access so analytics code stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Courses (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        title TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Centres (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        centre_name TEXT NOT NULL UNIQUE,
                        lga TEXT,
                        declared_capacity INTEGER NOT NULL DEFAULT 0 CHECK (declared_capacity >= 0),
                        usable_capacity INTEGER NOT NULL DEFAULT 0 CHECK (usable_capacity >= 0),
                        computers_present INTEGER NOT NULL DEFAULT 0,
                        computers_functional INTEGER NOT NULL DEFAULT 0,
                        power_available INTEGER NOT NULL DEFAULT 0 CHECK (power_available IN (0,1)),
                        internet_available INTEGER NOT NULL DEFAULT 0 CHECK (internet_available IN (0,1)),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Trainees (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        full_name TEXT NOT NULL,
                        age INTEGER,
                        gender TEXT,
                        employment_status TEXT,
                        educational_background TEXT,
                        course_id INTEGER,
                        centre_name TEXT,
                        lga TEXT,
                        cohort_number INTEGER NOT NULL DEFAULT 1,
                        enrolled_at TEXT,
                        passed INTEGER NOT NULL DEFAULT 0,
                        failed INTEGER NOT NULL DEFAULT 0,
                        not_sat_for_exams INTEGER NOT NULL DEFAULT 0,
                        dropout INTEGER NOT NULL DEFAULT 0,
                        FOREIGN KEY (course_id) REFERENCES Courses(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Instructors (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        email TEXT NOT NULL UNIQUE,
                        lga TEXT,
                        technical_manager_name TEXT,
                        phone_number TEXT,
                        centre_name TEXT,
                        status TEXT NOT NULL DEFAULT 'pending'
                            CHECK (status IN ('pending', 'approved', 'revoked', 'active')),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS WeeklyReports (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        centre_name TEXT NOT NULL,
                        technical_manager_name TEXT NOT NULL,
                        week_number INTEGER NOT NULL CHECK (week_number BETWEEN 1 AND 53),
                        year INTEGER NOT NULL,
                        comments TEXT,
                        trainees_enrolled INTEGER NOT NULL DEFAULT 0 CHECK (trainees_enrolled >= 0),
                        trainees_completed INTEGER NOT NULL DEFAULT 0 CHECK (trainees_completed >= 0),
                        trainees_dropped INTEGER NOT NULL DEFAULT 0 CHECK (trainees_dropped >= 0),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        UNIQUE (centre_name, week_number, year)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS MEReports (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        centre_name TEXT NOT NULL,
                        technical_manager_name TEXT NOT NULL,
                        month INTEGER NOT NULL CHECK (month BETWEEN 1 AND 12),
                        year INTEGER NOT NULL,
                        comments TEXT,
                        total_enrollment INTEGER NOT NULL DEFAULT 0 CHECK (total_enrollment >= 0),
                        total_completion INTEGER NOT NULL DEFAULT 0 CHECK (total_completion >= 0),
                        total_dropout INTEGER NOT NULL DEFAULT 0 CHECK (total_dropout >= 0),
                        employment_rate REAL NOT NULL DEFAULT 0
                            CHECK (employment_rate BETWEEN 0 AND 100),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        UNIQUE (centre_name, month, year)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_trainees_centre
                    ON Trainees(centre_name);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_synthetic_data(self) -> int:
        """Seed deterministic demo records only when the tables are empty.

        Returns the number of trainees inserted (0 when already seeded).
        """
        rng = random.Random(self._settings.synthetic_random_seed)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    SELECT
                        (SELECT COUNT(*) FROM Trainees)
                        + (SELECT COUNT(*) FROM Centres)
                        + (SELECT COUNT(*) FROM Courses)
                        + (SELECT COUNT(*) FROM Instructors) AS count;
                    """
                )
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Synthetic data already present; skipping seed")
                    return 0

                courses = [
                    ("Computer Appreciation",),
                    ("Web Development Fundamentals",),
                    ("Advanced Networking",),
                    ("Advanced Data Analysis",),
                ]
                cursor.executemany("INSERT INTO Courses (title) VALUES (?);", courses)
                cursor.execute("SELECT id FROM Courses ORDER BY id ASC;")
                course_ids = [int(row["id"]) for row in cursor.fetchall()]

                centres = [
                    ("Maiduguri Hub", "Maiduguri", 60, 50, 40, 34, 1, 1),
                    ("Jere Digital Centre", "Jere", 40, 35, 25, 20, 1, 0),
                    ("Biu Skills Centre", "Biu", 30, 30, 15, 12, 0, 1),
                    ("Konduga ICT Centre", "Konduga", 25, 20, 10, 6, 0, 0),
                ]
                cursor.executemany(
                    f"""
                    INSERT INTO Centres ({", ".join(_CENTRE_COLUMNS)})
                    VALUES ({", ".join("?" for _ in _CENTRE_COLUMNS)});
                    """,
                    centres,
                )

                instructors = [
                    (
                        f"Instructor {index + 1}",
                        f"instructor{index + 1}@example.org",
                        centre[1],
                        f"Manager {index + 1}",
                        "",
                        centre[0],
                        "active",
                    )
                    for index, centre in enumerate(centres)
                ]
                cursor.executemany(
                    f"""
                    INSERT INTO Instructors ({", ".join(_INSTRUCTOR_COLUMNS)})
                    VALUES ({", ".join("?" for _ in _INSTRUCTOR_COLUMNS)});
                    """,
                    instructors,
                )

                history_months = self._settings.synthetic_history_months
                start = datetime.now(timezone.utc) - timedelta(days=30 * history_months)
                genders = ("male", "female")
                employment = ("employed", "unemployed", "student", "self-employed")
                education = ("none", "primary", "secondary", "tertiary")

                trainee_rows = []
                for index in range(self._settings.synthetic_trainee_count):
                    centre = centres[index % len(centres)]
                    outcome = rng.random()
                    enrolled_at = start + timedelta(days=rng.randint(0, 30 * history_months - 1))
                    trainee_rows.append(
                        (
                            f"Trainee {index + 1:03d}",
                            rng.randint(16, 45),
                            rng.choice(genders),
                            rng.choice(employment),
                            rng.choice(education),
                            rng.choice(course_ids),
                            centre[0],
                            centre[1],
                            1 + index % 3,
                            enrolled_at.date().isoformat(),
                            int(outcome < 0.55),
                            int(0.55 <= outcome < 0.70),
                            int(0.70 <= outcome < 0.80),
                            int(0.80 <= outcome < 0.92),
                        )
                    )

                cursor.executemany(
                    f"""
                    INSERT INTO Trainees ({", ".join(_TRAINEE_COLUMNS)})
                    VALUES ({", ".join("?" for _ in _TRAINEE_COLUMNS)});
                    """,
                    trainee_rows,
                )
                conn.commit()
            logger.info(
                "Synthetic seed completed | courses=%s | centres=%s | instructors=%s | trainees=%s",
                len(courses),
                len(centres),
                len(instructors),
                len(trainee_rows),
            )
            return len(trainee_rows)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Synthetic data seeding failed: {exc}") from exc

    # --- Courses ---

    def list_courses(self) -> list[CourseRecord]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id, title FROM Courses ORDER BY id ASC;")
            return [
                CourseRecord(course_id=int(row["id"]), title=str(row["title"]))
                for row in cursor.fetchall()
            ]

    def create_course(self, title: str) -> CourseRecord:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("INSERT INTO Courses (title) VALUES (?);", (title,))
            conn.commit()
            return CourseRecord(course_id=int(cursor.lastrowid), title=title)

    def get_course(self, course_id: int) -> CourseRecord:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id, title FROM Courses WHERE id = ?;", (course_id,))
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"course_id {course_id} not found")
        return CourseRecord(course_id=int(row["id"]), title=str(row["title"]))

    def update_course(self, course_id: int, title: str) -> CourseRecord:
        self._update_row("Courses", course_id, {"title": title}, ("title",))
        return self.get_course(course_id)

    def delete_course(self, course_id: int) -> None:
        """Delete a course; refused while trainees still reference it."""
        self._delete_row("Courses", course_id)

    # --- Instructors ---

    def list_instructors(self, centre_name: Optional[str] = None) -> list[InstructorRecord]:
        query = f"SELECT id, {', '.join(_INSTRUCTOR_COLUMNS)} FROM Instructors"
        params: tuple[Any, ...] = ()
        if centre_name is not None:
            query += " WHERE LOWER(TRIM(centre_name)) = ?"
            params = (centre_name.strip().lower(),)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(f"{query} ORDER BY id ASC;", params)
            return [_instructor_from_row(row) for row in cursor.fetchall()]

    def get_instructor(self, instructor_id: int) -> InstructorRecord:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT id, {', '.join(_INSTRUCTOR_COLUMNS)} FROM Instructors WHERE id = ?;",
                (instructor_id,),
            )
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"instructor_id {instructor_id} not found")
        return _instructor_from_row(row)

    def create_instructor(self, instructor: InstructorRecord) -> InstructorRecord:
        _validate_instructor_status(instructor.status)
        values = asdict(instructor)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"""
                    INSERT INTO Instructors ({", ".join(_INSTRUCTOR_COLUMNS)})
                    VALUES ({", ".join("?" for _ in _INSTRUCTOR_COLUMNS)});
                    """,
                    tuple(values[column] for column in _INSTRUCTOR_COLUMNS),
                )
                conn.commit()
                instructor_id = int(cursor.lastrowid)
        except sqlite3.IntegrityError as exc:
            raise RecordConflictError(
                f"instructor email '{instructor.email}' already exists"
            ) from exc
        return self.get_instructor(instructor_id)

    def update_instructor(self, instructor_id: int, changes: dict[str, Any]) -> InstructorRecord:
        if "status" in changes:
            _validate_instructor_status(changes["status"])
        self._update_row("Instructors", instructor_id, changes, _INSTRUCTOR_COLUMNS)
        return self.get_instructor(instructor_id)

    def set_instructor_status(self, instructor_id: int, status: str) -> InstructorRecord:
        instructor = self.update_instructor(instructor_id, {"status": status})
        logger.info("Instructor status changed | instructor_id=%s | status=%s", instructor_id, status)
        return instructor

    def delete_instructor(self, instructor_id: int) -> None:
        self._delete_row("Instructors", instructor_id)

    # --- Reports ---

    def create_weekly_report(self, report: WeeklyReportRecord) -> WeeklyReportRecord:
        values = asdict(report)
        report_id = self._insert_report(
            "WeeklyReports",
            _WEEKLY_REPORT_COLUMNS,
            values,
            f"weekly report for '{report.centre_name}' week {report.week_number}/{report.year}",
        )
        return self._get_report(
            "WeeklyReports", _WEEKLY_REPORT_COLUMNS, report_id, _weekly_report_from_row
        )

    def list_weekly_reports(self, centre_name: Optional[str] = None) -> list[WeeklyReportRecord]:
        return self._list_reports(
            "WeeklyReports",
            _WEEKLY_REPORT_COLUMNS,
            "year DESC, week_number DESC, id ASC",
            centre_name,
            _weekly_report_from_row,
        )

    def create_me_report(self, report: MEReportRecord) -> MEReportRecord:
        values = asdict(report)
        report_id = self._insert_report(
            "MEReports",
            _ME_REPORT_COLUMNS,
            values,
            f"M&E report for '{report.centre_name}' {report.month}/{report.year}",
        )
        return self._get_report("MEReports", _ME_REPORT_COLUMNS, report_id, _me_report_from_row)

    def list_me_reports(self, centre_name: Optional[str] = None) -> list[MEReportRecord]:
        return self._list_reports(
            "MEReports",
            _ME_REPORT_COLUMNS,
            "year DESC, month DESC, id ASC",
            centre_name,
            _me_report_from_row,
        )

    def _insert_report(
        self,
        table: str,
        columns: tuple[str, ...],
        values: dict[str, Any],
        description: str,
    ) -> int:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"""
                    INSERT INTO {table} ({", ".join(columns)})
                    VALUES ({", ".join("?" for _ in columns)});
                    """,
                    tuple(values[column] for column in columns),
                )
                conn.commit()
                report_id = int(cursor.lastrowid)
        except sqlite3.IntegrityError as exc:
            raise RecordConflictError(f"{description} rejected: {exc}") from exc
        logger.info("Report submitted | table=%s | report_id=%s", table, report_id)
        return report_id

    def _get_report(
        self,
        table: str,
        columns: tuple[str, ...],
        report_id: int,
        from_row: Callable[[sqlite3.Row], ReportT],
    ) -> ReportT:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT id, {', '.join(columns)}, created_at FROM {table} WHERE id = ?;",
                (report_id,),
            )
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"{table} id {report_id} not found")
        return from_row(row)

    def _list_reports(
        self,
        table: str,
        columns: tuple[str, ...],
        order_by: str,
        centre_name: Optional[str],
        from_row: Callable[[sqlite3.Row], ReportT],
    ) -> list[ReportT]:
        query = f"SELECT id, {', '.join(columns)}, created_at FROM {table}"
        params: tuple[Any, ...] = ()
        if centre_name is not None:
            query += " WHERE LOWER(TRIM(centre_name)) = ?"
            params = (centre_name.strip().lower(),)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(f"{query} ORDER BY {order_by};", params)
            return [from_row(row) for row in cursor.fetchall()]

    # --- Centres ---

    def list_centres(self) -> list[CentreRecord]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT id, {', '.join(_CENTRE_COLUMNS)} FROM Centres ORDER BY id ASC;"
            )
            return [_centre_from_row(row) for row in cursor.fetchall()]

    def get_centre(self, centre_id: int) -> CentreRecord:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT id, {', '.join(_CENTRE_COLUMNS)} FROM Centres WHERE id = ?;",
                (centre_id,),
            )
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"centre_id {centre_id} not found")
        return _centre_from_row(row)

    def create_centre(self, centre: CentreRecord) -> CentreRecord:
        values = asdict(centre)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"""
                    INSERT INTO Centres ({", ".join(_CENTRE_COLUMNS)})
                    VALUES ({", ".join("?" for _ in _CENTRE_COLUMNS)});
                    """,
                    tuple(values[column] for column in _CENTRE_COLUMNS),
                )
                conn.commit()
                centre_id = int(cursor.lastrowid)
        except sqlite3.IntegrityError as exc:
            raise RecordConflictError(
                f"centre_name '{centre.centre_name}' already exists"
            ) from exc
        return self.get_centre(centre_id)

    def update_centre(self, centre_id: int, changes: dict[str, Any]) -> CentreRecord:
        self._update_row("Centres", centre_id, changes, _CENTRE_COLUMNS)
        return self.get_centre(centre_id)

    def delete_centre(self, centre_id: int) -> None:
        self._delete_row("Centres", centre_id)

    # --- Trainees ---

    def list_trainees(self) -> list[TraineeRecord]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT id, {', '.join(_TRAINEE_COLUMNS)} FROM Trainees ORDER BY id ASC;"
            )
            return [_trainee_from_row(row) for row in cursor.fetchall()]

    def get_trainee(self, trainee_id: int) -> TraineeRecord:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT id, {', '.join(_TRAINEE_COLUMNS)} FROM Trainees WHERE id = ?;",
                (trainee_id,),
            )
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"trainee_id {trainee_id} not found")
        return _trainee_from_row(row)

    def create_trainee(self, trainee: TraineeRecord) -> TraineeRecord:
        values = _trainee_values(trainee)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"""
                    INSERT INTO Trainees ({", ".join(_TRAINEE_COLUMNS)})
                    VALUES ({", ".join("?" for _ in _TRAINEE_COLUMNS)});
                    """,
                    tuple(values[column] for column in _TRAINEE_COLUMNS),
                )
                conn.commit()
                trainee_id = int(cursor.lastrowid)
        except sqlite3.IntegrityError as exc:
            raise RecordConflictError(
                f"course_id {trainee.course_id} does not reference an existing course"
            ) from exc
        return self.get_trainee(trainee_id)

    def update_trainee(self, trainee_id: int, changes: dict[str, Any]) -> TraineeRecord:
        columns = {_TRAINEE_FIELD_TO_COLUMN.get(key, key): value for key, value in changes.items()}
        self._update_row("Trainees", trainee_id, columns, _TRAINEE_COLUMNS)
        return self.get_trainee(trainee_id)

    def delete_trainee(self, trainee_id: int) -> None:
        self._delete_row("Trainees", trainee_id)

    # --- Shared helpers ---

    def _update_row(
        self,
        table: str,
        row_id: int,
        changes: dict[str, Any],
        allowed_columns: tuple[str, ...],
    ) -> None:
        unknown = sorted(set(changes) - set(allowed_columns))
        if unknown:
            raise ValueError(f"unknown {table} columns: {', '.join(unknown)}")
        if not changes:
            return
        assignments = ", ".join(f"{column} = ?" for column in changes)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"UPDATE {table} SET {assignments} WHERE id = ?;",
                    (*changes.values(), row_id),
                )
                conn.commit()
                updated_rows = cursor.rowcount
        except sqlite3.IntegrityError as exc:
            raise RecordConflictError(f"{table} id {row_id} update rejected: {exc}") from exc
        if updated_rows == 0:
            raise RecordNotFoundError(f"{table} id {row_id} not found")

    def _delete_row(self, table: str, row_id: int) -> None:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(f"DELETE FROM {table} WHERE id = ?;", (row_id,))
                conn.commit()
                deleted_rows = cursor.rowcount
        except sqlite3.IntegrityError as exc:
            raise RecordConflictError(f"{table} id {row_id} is still referenced") from exc
        if deleted_rows == 0:
            raise RecordNotFoundError(f"{table} id {row_id} not found")
