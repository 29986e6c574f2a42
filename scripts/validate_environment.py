#!/usr/bin/env python3
"""Validate local analytics service environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from training_analytics.repository.data_repository import DataRepository
from training_analytics.services.analytics_service import AnalyticsEngine
from training_analytics.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="training-analytics-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("numpy", "numpy"),
        ("pandas", "pandas"),
        ("sklearn", "scikit-learn"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "training_analytics_validation.db",
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except RuntimeError as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Synthetic data seeding
        expected_rows = validation_settings.synthetic_trainee_count
        try:
            seeded_rows = repository.seed_synthetic_data()
            if seeded_rows != expected_rows:
                raise RuntimeError(f"expected {expected_rows} trainees, got {seeded_rows}")
            ok, line = _print_result(f"Synthetic dataset: {seeded_rows} trainees", True)
        except RuntimeError as exc:
            ok, line = _print_result("Synthetic dataset", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Analytics engine run over stored records
        try:
            engine = AnalyticsEngine(settings=validation_settings)
            metrics = engine.compute_predictive_metrics(
                repository.list_trainees(),
                repository.list_centres(),
                repository.list_courses(),
            )
            if len(metrics.dropout_risks) != expected_rows:
                raise RuntimeError("dropout risk count does not match trainee count")
            if len(metrics.resource_demand) != 4 or len(metrics.performance_optimization) != 4:
                raise RuntimeError("resource/optimization collections must have 4 entries")
            ok, line = _print_result(
                "Analytics engine",
                True,
                f": {len(metrics.enrollment_forecast)} forecast periods",
            )
        except (RuntimeError, ValueError) as exc:
            ok, line = _print_result("Analytics engine", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Training Analytics Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
