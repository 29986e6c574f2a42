"""Dropout risk scoring weights and their validation rules."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringPolicy:
    young_age_limit: int = 20
    young_age_weight: int = 25
    older_age_limit: int = 35
    older_age_weight: int = 15
    unemployed_weight: int = 20
    employed_weight: int = -10
    no_education_weight: int = 30
    primary_education_weight: int = 20
    tertiary_education_weight: int = -15
    # Demographic input; keep overridable and set to 0 to drop the factor.
    female_weight: int = 10
    advanced_course_weight: int = 15
    advanced_course_keyword: str = "Advanced"


@dataclass(frozen=True)
class RiskBands:
    very_high: int = 80
    high: int = 60
    medium: int = 40
    low: int = 20


def validate_scoring_policy(policy: ScoringPolicy) -> None:
    if policy.young_age_limit < 0 or policy.older_age_limit < 0:
        raise ValueError("age limits must be >= 0")
    if policy.young_age_limit > policy.older_age_limit:
        raise ValueError("young_age_limit must not exceed older_age_limit")
    if policy.female_weight < 0:
        raise ValueError("female_weight must be >= 0")
    if not policy.advanced_course_keyword:
        raise ValueError("advanced_course_keyword must be non-empty")


def validate_risk_bands(bands: RiskBands) -> None:
    if not 0 < bands.low < bands.medium < bands.high < bands.very_high <= 100:
        raise ValueError("risk bands must be strictly increasing within (0, 100]")
