"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


_ENV_PREFIX = "TA_"


def _env(name: str, default: str) -> str:
    return os.getenv(f"{_ENV_PREFIX}{name}", default)


def _env_int(name: str, default: int) -> int:
    return int(_env(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(_env(name, str(default)))


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path

    forecast_default_horizon_months: int
    resource_default_horizon_months: int
    forecast_max_horizon_months: int
    period_label_strategy: str

    risk_female_weight: int
    risk_advanced_course_keyword: str

    synthetic_random_seed: int
    synthetic_trainee_count: int
    synthetic_history_months: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call ``get_settings.cache_clear()`` to reload."""
    return Settings(
        app_name=_env("APP_NAME", "Training Programme Analytics"),
        app_version=_env("APP_VERSION", "1.0.0"),
        log_level=_env("LOG_LEVEL", "INFO"),
        database_path=Path(_env("DATABASE_PATH", "data/training_analytics.db")),
        forecast_default_horizon_months=_env_int("FORECAST_HORIZON_MONTHS", 6),
        resource_default_horizon_months=_env_int("RESOURCE_HORIZON_MONTHS", 3),
        forecast_max_horizon_months=_env_int("FORECAST_MAX_HORIZON_MONTHS", 36),
        period_label_strategy=_env("PERIOD_LABEL_STRATEGY", "legacy"),
        risk_female_weight=_env_int("RISK_FEMALE_WEIGHT", 10),
        risk_advanced_course_keyword=_env("RISK_ADVANCED_COURSE_KEYWORD", "Advanced"),
        synthetic_random_seed=_env_int("SYNTHETIC_RANDOM_SEED", 42),
        synthetic_trainee_count=_env_int("SYNTHETIC_TRAINEE_COUNT", 120),
        synthetic_history_months=_env_int("SYNTHETIC_HISTORY_MONTHS", 12),
    )
