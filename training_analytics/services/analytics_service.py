"""Predictive analytics over trainee, centre and course snapshots.

Every public method is a pure computation over the records it is given: no
repository access, no persisted state, no randomness. The only value that is
not derived from the inputs is the assessment timestamp on dropout risk rows,
which callers can pin with ``assessed_at``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from training_analytics.domain.models import (
    CentreRecord,
    CourseRecord,
    DropoutRiskAssessment,
    EnrollmentForecast,
    PerformanceOptimization,
    PredictiveMetrics,
    ResourceDemandPrediction,
    TraineeRecord,
)
from training_analytics.domain.scoring import (
    RiskBands,
    ScoringPolicy,
    validate_risk_bands,
    validate_scoring_policy,
)
from training_analytics.utils.config import Settings, get_settings
from training_analytics.utils.logger import get_logger
from training_analytics.utils.timestamps import calendar_month


logger = get_logger(__name__)


class AnalyticsValidationError(ValueError):
    """Raised when the engine is configured with invalid parameters."""


# Used when no trainee carries a usable enrollment timestamp.
SYNTHETIC_MONTHLY_ENROLLMENTS: tuple[int, ...] = (12, 15, 18, 22, 25, 28, 30, 32, 35, 38, 40, 42)
SEASONAL_FACTORS: tuple[float, ...] = (0.8, 0.9, 1.0, 1.1, 1.2, 1.1, 1.0, 0.9, 1.0, 1.1, 1.0, 0.9)
LEGACY_PERIOD_LABELS: tuple[str, ...] = ("Next Month", "Next Quarter", "Next Semester", "Next Year")

TREND_THRESHOLD = 0.1
GROWTH_RATE_SCALE = 0.01

# Placeholder "current" values until completion, utilisation and employment
# outcomes are aggregated from real records.
PLACEHOLDER_COMPLETION_RATE = 75.0
PLACEHOLDER_RESOURCE_UTILIZATION = 65.0
PLACEHOLDER_EMPLOYMENT_OUTCOME_RATE = 60.0

TARGET_COMPLETION_RATE = 85.0
TARGET_RESOURCE_UTILIZATION = 80.0
TARGET_GENDER_BALANCE = 50.0
TARGET_EMPLOYMENT_OUTCOME_RATE = 70.0

FACTOR_YOUNG_AGE = "Young age (under 20)"
FACTOR_OLDER_AGE = "Older age (over 35)"
FACTOR_UNEMPLOYED = "Unemployed status"
FACTOR_NO_EDUCATION = "No formal education"
FACTOR_PRIMARY_EDUCATION = "Primary education only"
FACTOR_FEMALE = "Female (higher dropout rate)"
FACTOR_ADVANCED_COURSE = "Advanced course difficulty"


@dataclass(frozen=True)
class ResourceProfile:
    resource_type: str
    demand_ratio: float
    confidence: float
    recommendations: tuple[str, str]


RESOURCE_PROFILES: tuple[ResourceProfile, ...] = (
    ResourceProfile(
        resource_type="computers",
        demand_ratio=0.5,
        confidence=0.85,
        recommendations=("Increase computer inventory", "Consider computer sharing programs"),
    ),
    ResourceProfile(
        resource_type="internet_bandwidth",
        demand_ratio=0.8,
        confidence=0.80,
        recommendations=("Upgrade internet bandwidth", "Implement bandwidth management"),
    ),
    ResourceProfile(
        resource_type="power_consumption",
        demand_ratio=0.6,
        confidence=0.75,
        recommendations=("Install backup power systems", "Optimize power consumption"),
    ),
    ResourceProfile(
        resource_type="classroom_space",
        demand_ratio=0.4,
        confidence=0.90,
        recommendations=("Expand classroom facilities", "Implement flexible scheduling"),
    ),
)


def _legacy_period_label(step: int) -> str:
    return LEGACY_PERIOD_LABELS[min(step - 1, len(LEGACY_PERIOD_LABELS) - 1)]


def _monthly_period_label(step: int) -> str:
    return f"Month {step}"


PERIOD_LABEL_STRATEGIES: dict[str, Callable[[int], str]] = {
    "legacy": _legacy_period_label,
    "monthly": _monthly_period_label,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _normalize_category(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip().lower()


def _numeric_age(value: object) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def build_monthly_enrollment_series(trainees: Sequence[TraineeRecord]) -> list[int]:
    """Count enrollments per observed calendar month, oldest first.

    Months are taken from the timestamp as written, so an offset such as
    ``-05:00`` never moves an enrollment into the neighbouring UTC month.
    """

    months = [calendar_month(trainee.enrolled_at) for trainee in trainees]
    observed = [month for month in months if month is not None]
    if not observed:
        return []

    counts = pd.Series(observed).value_counts().sort_index()
    return [int(count) for count in counts.tolist()]


def fit_trend_slope(series: Sequence[int]) -> float:
    """Least-squares slope of count against month index; 0 when degenerate."""

    if len(series) < 2:
        return 0.0
    x = np.arange(len(series), dtype=float).reshape(-1, 1)
    y = np.asarray(series, dtype=float)
    slope = float(LinearRegression().fit(x, y).coef_[0])
    if not math.isfinite(slope):
        return 0.0
    return slope


def trend_direction(slope: float) -> str:
    if slope > TREND_THRESHOLD:
        return "increasing"
    if slope < -TREND_THRESHOLD:
        return "decreasing"
    return "stable"


def forecast_confidence(step: int, slope: float) -> float:
    time_decay = max(0.5, 1.0 - step * 0.1)
    trend_stability = max(0.7, 1.0 - abs(slope) * 0.5)
    return min(1.0, max(0.0, time_decay * trend_stability))


def enrollment_factors(step: int, slope: float) -> list[str]:
    factors: list[str] = []
    if slope > 0:
        factors.append("Growing market demand")
    if step <= 3:
        factors.append("Seasonal enrollment patterns")
    if step > 6:
        factors.append("Long-term trend projection")
    return factors


class AnalyticsEngine:
    """Heuristic forecasting, risk scoring and optimisation targets."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        policy: Optional[ScoringPolicy] = None,
        bands: Optional[RiskBands] = None,
        period_label_strategy: Optional[str] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._policy = policy or ScoringPolicy(
            female_weight=self._settings.risk_female_weight,
            advanced_course_keyword=self._settings.risk_advanced_course_keyword,
        )
        self._bands = bands or RiskBands()
        strategy_name = period_label_strategy or self._settings.period_label_strategy

        try:
            validate_scoring_policy(self._policy)
            validate_risk_bands(self._bands)
        except ValueError as exc:
            raise AnalyticsValidationError(str(exc)) from exc
        if strategy_name not in PERIOD_LABEL_STRATEGIES:
            raise AnalyticsValidationError(
                f"unknown period_label_strategy '{strategy_name}'; "
                f"expected one of {sorted(PERIOD_LABEL_STRATEGIES)}"
            )
        self._period_label = PERIOD_LABEL_STRATEGIES[strategy_name]

    @property
    def policy(self) -> ScoringPolicy:
        return self._policy

    def forecast_enrollment(
        self,
        trainees: Sequence[TraineeRecord],
        centres: Sequence[CentreRecord],
        courses: Sequence[CourseRecord],
        horizon_months: int,
    ) -> list[EnrollmentForecast]:
        """Project monthly enrollments for ``horizon_months`` future steps."""

        history = build_monthly_enrollment_series(trainees)
        if not history:
            logger.info(
                "No enrollment timestamps available | trainees=%s | using synthetic baseline",
                len(trainees),
            )
            history = list(SYNTHETIC_MONTHLY_ENROLLMENTS)

        slope = fit_trend_slope(history)
        base_enrollment = history[-1]
        direction = trend_direction(slope)

        forecasts: list[EnrollmentForecast] = []
        for step in range(1, horizon_months + 1):
            growth_factor = 1.0 + slope * step * GROWTH_RATE_SCALE
            seasonal_factor = SEASONAL_FACTORS[(step - 1) % len(SEASONAL_FACTORS)]
            predicted = max(0, _round_half_up(base_enrollment * growth_factor * seasonal_factor))
            forecasts.append(
                EnrollmentForecast(
                    period=self._period_label(step),
                    predicted_enrollment=predicted,
                    confidence=forecast_confidence(step, slope),
                    trend=direction,
                    factors=enrollment_factors(step, slope),
                )
            )

        logger.info(
            "Enrollment forecast computed | history_months=%s | slope=%.4f | horizon=%s",
            len(history),
            slope,
            horizon_months,
        )
        return forecasts

    def _score_trainee(
        self,
        trainee: TraineeRecord,
        course_titles: dict[object, str],
    ) -> tuple[int, list[str]]:
        policy = self._policy
        score = 0
        factors: list[str] = []

        age = _numeric_age(trainee.age)
        if age is not None:
            if age < policy.young_age_limit:
                score += policy.young_age_weight
                factors.append(FACTOR_YOUNG_AGE)
            elif age > policy.older_age_limit:
                score += policy.older_age_weight
                factors.append(FACTOR_OLDER_AGE)

        employment = _normalize_category(trainee.employment)
        if employment == "unemployed":
            score += policy.unemployed_weight
            factors.append(FACTOR_UNEMPLOYED)
        elif employment == "employed":
            score += policy.employed_weight

        education = _normalize_category(trainee.education)
        if education == "none":
            score += policy.no_education_weight
            factors.append(FACTOR_NO_EDUCATION)
        elif education == "primary":
            score += policy.primary_education_weight
            factors.append(FACTOR_PRIMARY_EDUCATION)
        elif education == "tertiary":
            score += policy.tertiary_education_weight

        if _normalize_category(trainee.gender) == "female" and policy.female_weight:
            score += policy.female_weight
            factors.append(FACTOR_FEMALE)

        title = course_titles.get(trainee.course_id)
        if title and policy.advanced_course_keyword in title:
            score += policy.advanced_course_weight
            factors.append(FACTOR_ADVANCED_COURSE)

        return max(0, min(100, score)), factors

    def risk_level(self, score: int) -> str:
        if score >= self._bands.very_high:
            return "very_high"
        if score >= self._bands.high:
            return "high"
        if score >= self._bands.medium:
            return "medium"
        if score >= self._bands.low:
            return "low"
        return "no_risk"

    @staticmethod
    def risk_recommendations(risk_level: str, factors: Sequence[str]) -> list[str]:
        recommendations: list[str] = []
        if risk_level in {"very_high", "high"}:
            recommendations.extend(
                [
                    "Assign mentor for regular check-ins",
                    "Provide additional academic support",
                    "Schedule regular progress reviews",
                ]
            )
        if FACTOR_UNEMPLOYED in factors:
            recommendations.append("Connect with employment support services")
        if FACTOR_NO_EDUCATION in factors:
            recommendations.append("Provide basic literacy support")
        if FACTOR_ADVANCED_COURSE in factors:
            recommendations.append("Offer prerequisite courses")
        return recommendations

    def assess_dropout_risk(
        self,
        trainees: Sequence[TraineeRecord],
        courses: Optional[Sequence[CourseRecord]] = None,
        *,
        assessed_at: Optional[datetime] = None,
    ) -> list[DropoutRiskAssessment]:
        """Score every trainee, preserving input order."""

        timestamp = assessed_at or datetime.now(timezone.utc)
        course_titles: dict[object, str] = {
            course.course_id: course.title for course in (courses or [])
        }

        assessments: list[DropoutRiskAssessment] = []
        for trainee in trainees:
            score, factors = self._score_trainee(trainee, course_titles)
            level = self.risk_level(score)
            assessments.append(
                DropoutRiskAssessment(
                    trainee_id=trainee.trainee_id,
                    trainee_name=trainee.name,
                    risk_level=level,
                    risk_score=score,
                    risk_factors=factors,
                    recommendations=self.risk_recommendations(level, factors),
                    last_assessment=timestamp,
                )
            )

        high_risk = sum(1 for item in assessments if item.risk_level in {"very_high", "high"})
        logger.info(
            "Dropout risk assessed | trainees=%s | high_or_above=%s",
            len(assessments),
            high_risk,
        )
        return assessments

    def predict_resource_demand(
        self,
        trainees: Sequence[TraineeRecord],
        centres: Sequence[CentreRecord],
        horizon_months: int,
    ) -> list[ResourceDemandPrediction]:
        """Scale per-resource ratios by current headcount and forecast total."""

        forecast = self.forecast_enrollment(trainees, centres, [], horizon_months)
        total_predicted = sum(item.predicted_enrollment for item in forecast)
        trainee_count = len(trainees)
        period = f"{horizon_months} months"

        predictions: list[ResourceDemandPrediction] = []
        for profile in RESOURCE_PROFILES:
            current = math.ceil(trainee_count * profile.demand_ratio)
            predicted = math.ceil(total_predicted * profile.demand_ratio)
            predictions.append(
                ResourceDemandPrediction(
                    resource_type=profile.resource_type,
                    current_demand=current,
                    predicted_demand=predicted,
                    confidence=profile.confidence,
                    period=period,
                    recommendations=list(profile.recommendations) if predicted > current else [],
                )
            )
        return predictions

    @staticmethod
    def gender_balance(trainees: Sequence[TraineeRecord]) -> float:
        """Female share of trainees in percent; 0 for an empty list."""
        if not trainees:
            return 0.0
        female_count = sum(
            1 for trainee in trainees if _normalize_category(trainee.gender) == "female"
        )
        return female_count / len(trainees) * 100.0

    def compute_optimization_targets(
        self,
        trainees: Sequence[TraineeRecord],
        centres: Sequence[CentreRecord],
        courses: Sequence[CourseRecord],
    ) -> list[PerformanceOptimization]:
        completion_gap = TARGET_COMPLETION_RATE - PLACEHOLDER_COMPLETION_RATE
        utilization_gap = TARGET_RESOURCE_UTILIZATION - PLACEHOLDER_RESOURCE_UTILIZATION
        current_balance = self.gender_balance(trainees)
        balance_gap = abs(TARGET_GENDER_BALANCE - current_balance)
        employment_gap = TARGET_EMPLOYMENT_OUTCOME_RATE - PLACEHOLDER_EMPLOYMENT_OUTCOME_RATE

        return [
            PerformanceOptimization(
                metric="completion_rate",
                current_value=PLACEHOLDER_COMPLETION_RATE,
                target_value=TARGET_COMPLETION_RATE,
                improvement=completion_gap,
                recommendations=(
                    [
                        "Implement early intervention programs",
                        "Provide additional academic support",
                        "Create peer mentoring programs",
                    ]
                    if completion_gap > 10
                    else []
                ),
                priority="high" if completion_gap > 10 else "medium",
            ),
            PerformanceOptimization(
                metric="resource_utilization",
                current_value=PLACEHOLDER_RESOURCE_UTILIZATION,
                target_value=TARGET_RESOURCE_UTILIZATION,
                improvement=utilization_gap,
                recommendations=(
                    [
                        "Optimize class scheduling",
                        "Implement resource sharing",
                        "Expand facility usage hours",
                    ]
                    if utilization_gap > 15
                    else []
                ),
                priority="high" if utilization_gap > 15 else "medium",
            ),
            PerformanceOptimization(
                metric="gender_balance",
                current_value=current_balance,
                target_value=TARGET_GENDER_BALANCE,
                improvement=balance_gap,
                recommendations=(
                    [
                        "Launch female-focused recruitment campaigns",
                        "Provide childcare support",
                        "Create women-only training sessions",
                    ]
                    if balance_gap > 20
                    else []
                ),
                priority="high" if balance_gap > 20 else "low",
            ),
            PerformanceOptimization(
                metric="employment_outcome",
                current_value=PLACEHOLDER_EMPLOYMENT_OUTCOME_RATE,
                target_value=TARGET_EMPLOYMENT_OUTCOME_RATE,
                improvement=employment_gap,
                recommendations=(
                    [
                        "Strengthen industry partnerships",
                        "Provide job placement services",
                        "Offer career counseling",
                    ]
                    if employment_gap > 15
                    else []
                ),
                priority="high" if employment_gap > 15 else "medium",
            ),
        ]

    def compute_predictive_metrics(
        self,
        trainees: Sequence[TraineeRecord],
        centres: Sequence[CentreRecord],
        courses: Sequence[CourseRecord],
        *,
        horizon_months: Optional[int] = None,
        resource_horizon_months: Optional[int] = None,
        assessed_at: Optional[datetime] = None,
    ) -> PredictiveMetrics:
        forecast_horizon = (
            self._settings.forecast_default_horizon_months
            if horizon_months is None
            else horizon_months
        )
        resource_horizon = (
            self._settings.resource_default_horizon_months
            if resource_horizon_months is None
            else resource_horizon_months
        )
        return PredictiveMetrics(
            enrollment_forecast=self.forecast_enrollment(
                trainees, centres, courses, forecast_horizon
            ),
            dropout_risks=self.assess_dropout_risk(trainees, courses, assessed_at=assessed_at),
            resource_demand=self.predict_resource_demand(trainees, centres, resource_horizon),
            performance_optimization=self.compute_optimization_targets(
                trainees, centres, courses
            ),
        )
