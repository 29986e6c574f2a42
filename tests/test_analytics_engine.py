from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from training_analytics.domain.models import CentreRecord, CourseRecord, TraineeRecord
from training_analytics.domain.scoring import RiskBands, ScoringPolicy
from training_analytics.services.analytics_service import (
    FACTOR_ADVANCED_COURSE,
    FACTOR_FEMALE,
    FACTOR_NO_EDUCATION,
    FACTOR_UNEMPLOYED,
    FACTOR_YOUNG_AGE,
    AnalyticsEngine,
    AnalyticsValidationError,
    build_monthly_enrollment_series,
    fit_trend_slope,
)
from training_analytics.utils.config import get_settings


ASSESSED_AT = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

COURSES = [
    CourseRecord(course_id=1, title="Computer Appreciation"),
    CourseRecord(course_id=2, title="Advanced Networking"),
]


def _build_engine(**overrides) -> AnalyticsEngine:
    settings = replace(get_settings(), period_label_strategy="legacy", risk_female_weight=10)
    return AnalyticsEngine(settings=settings, **overrides)


def _trainee(trainee_id: int = 1, **fields) -> TraineeRecord:
    return TraineeRecord(trainee_id=trainee_id, name=f"Trainee {trainee_id}", **fields)


def test_highest_risk_profile_scores_very_high_with_ordered_factors():
    engine = _build_engine()
    trainee = _trainee(age=18, gender="female", employment="unemployed", education="none")

    [assessment] = engine.assess_dropout_risk([trainee], COURSES, assessed_at=ASSESSED_AT)

    assert assessment.risk_score == 85
    assert assessment.risk_level == "very_high"
    assert assessment.risk_factors == [
        FACTOR_YOUNG_AGE,
        FACTOR_UNEMPLOYED,
        FACTOR_NO_EDUCATION,
        FACTOR_FEMALE,
    ]
    assert assessment.recommendations == [
        "Assign mentor for regular check-ins",
        "Provide additional academic support",
        "Schedule regular progress reviews",
        "Connect with employment support services",
        "Provide basic literacy support",
    ]
    assert assessment.last_assessment == ASSESSED_AT


def test_protective_factors_offset_advanced_course():
    engine = _build_engine()
    trainee = _trainee(
        age=40,
        gender="male",
        employment="employed",
        education="tertiary",
        course_id=2,
    )

    [assessment] = engine.assess_dropout_risk([trainee], COURSES, assessed_at=ASSESSED_AT)

    # 15 (older) - 10 (employed) - 15 (tertiary) + 15 (advanced course)
    assert assessment.risk_score == 5
    assert assessment.risk_level == "no_risk"
    assert FACTOR_ADVANCED_COURSE in assessment.risk_factors
    assert assessment.recommendations == ["Offer prerequisite courses"]


def test_scores_are_clamped_to_valid_range():
    engine = _build_engine()
    protected = _trainee(age=25, gender="male", employment="employed", education="tertiary")
    heavy = _build_engine(policy=ScoringPolicy(no_education_weight=90))
    at_risk = _trainee(age=17, gender="female", employment="unemployed", education="none")

    [low] = engine.assess_dropout_risk([protected], assessed_at=ASSESSED_AT)
    [high] = heavy.assess_dropout_risk([at_risk], assessed_at=ASSESSED_AT)

    assert low.risk_score == 0
    assert high.risk_score == 100


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (0, "no_risk"),
        (19, "no_risk"),
        (20, "low"),
        (39, "low"),
        (40, "medium"),
        (59, "medium"),
        (60, "high"),
        (79, "high"),
        (80, "very_high"),
        (100, "very_high"),
    ],
)
def test_risk_level_thresholds(score, expected):
    assert _build_engine().risk_level(score) == expected


def test_unknown_categories_and_missing_age_contribute_nothing():
    engine = _build_engine()
    trainee = _trainee(age=None, gender="Other", employment="student", education="secondary")

    [assessment] = engine.assess_dropout_risk([trainee], assessed_at=ASSESSED_AT)

    assert assessment.risk_score == 0
    assert assessment.risk_factors == []
    assert assessment.recommendations == []


def test_category_matching_ignores_case_and_whitespace():
    engine = _build_engine()
    trainee = _trainee(gender=" Female ", employment="UNEMPLOYED", education="Primary")

    [assessment] = engine.assess_dropout_risk([trainee], assessed_at=ASSESSED_AT)

    assert assessment.risk_score == 50
    assert assessment.risk_level == "medium"


def test_advanced_keyword_is_case_sensitive():
    engine = _build_engine()
    courses = [CourseRecord(course_id=3, title="advanced spreadsheets")]

    [assessment] = engine.assess_dropout_risk(
        [_trainee(course_id=3)], courses, assessed_at=ASSESSED_AT
    )

    assert FACTOR_ADVANCED_COURSE not in assessment.risk_factors


def test_female_factor_can_be_disabled():
    engine = _build_engine(policy=ScoringPolicy(female_weight=0))

    [assessment] = engine.assess_dropout_risk(
        [_trainee(gender="female")], assessed_at=ASSESSED_AT
    )

    assert assessment.risk_score == 0
    assert FACTOR_FEMALE not in assessment.risk_factors


def test_risk_assessment_is_repeatable_and_preserves_order():
    engine = _build_engine()
    trainees = [
        _trainee(3, age=19, employment="unemployed"),
        _trainee(1, age=30, education="primary"),
        _trainee(2, gender="female"),
    ]

    first = engine.assess_dropout_risk(trainees, COURSES, assessed_at=ASSESSED_AT)
    second = engine.assess_dropout_risk(trainees, COURSES, assessed_at=ASSESSED_AT)

    assert first == second
    assert [item.trainee_id for item in first] == [3, 1, 2]


def test_empty_trainee_list_yields_no_assessments():
    assert _build_engine().assess_dropout_risk([], COURSES) == []


def test_baseline_forecast_without_enrollment_history():
    engine = _build_engine()

    forecasts = engine.forecast_enrollment([], [], [], 6)

    assert len(forecasts) == 6
    first = forecasts[0]
    assert first.predicted_enrollment == 35
    assert first.confidence == pytest.approx(0.63)
    assert first.trend == "increasing"
    assert first.factors == ["Growing market demand", "Seasonal enrollment patterns"]
    assert forecasts[1].predicted_enrollment == 40
    assert forecasts[2].predicted_enrollment == 45
    assert forecasts[3].factors == ["Growing market demand"]


def test_legacy_labels_repeat_after_fourth_step():
    forecasts = _build_engine().forecast_enrollment([], [], [], 6)

    assert [item.period for item in forecasts] == [
        "Next Month",
        "Next Quarter",
        "Next Semester",
        "Next Year",
        "Next Year",
        "Next Year",
    ]


def test_monthly_label_strategy_numbers_each_step():
    engine = _build_engine(period_label_strategy="monthly")

    forecasts = engine.forecast_enrollment([], [], [], 8)

    assert [item.period for item in forecasts] == [f"Month {step}" for step in range(1, 9)]
    assert forecasts[6].factors == ["Growing market demand", "Long-term trend projection"]


def test_forecast_confidence_decays_to_floor():
    forecasts = _build_engine().forecast_enrollment([], [], [], 12)

    confidences = [item.confidence for item in forecasts]
    assert confidences == sorted(confidences, reverse=True)
    assert confidences[-1] == pytest.approx(0.35)
    assert all(0.0 <= value <= 1.0 for value in confidences)


def test_non_positive_horizon_returns_empty_forecast():
    engine = _build_engine()

    assert engine.forecast_enrollment([], [], [], 0) == []
    assert engine.forecast_enrollment([], [], [], -3) == []


def test_forecast_uses_enrollment_timestamps_when_available():
    trainees = [
        _trainee(1, enrolled_at="2025-01-10"),
        _trainee(2, enrolled_at="2025-02-03"),
        _trainee(3, enrolled_at="2025-02-21T08:30:00Z"),
        _trainee(4, enrolled_at="2025-03-02"),
        _trainee(5, enrolled_at="2025-03-15"),
        _trainee(6, enrolled_at="2025-03-28"),
        _trainee(7, enrolled_at="not-a-date"),
        _trainee(8, enrolled_at=None),
    ]

    assert build_monthly_enrollment_series(trainees) == [1, 2, 3]

    [forecast] = _build_engine().forecast_enrollment(trainees, [], [], 1)

    # slope 1.0 on [1, 2, 3]: round(3 * 1.01 * 0.8)
    assert forecast.predicted_enrollment == 2
    assert forecast.trend == "increasing"


def test_single_month_history_is_stable():
    trainees = [_trainee(index, enrolled_at="2025-06-01") for index in range(1, 5)]

    forecasts = _build_engine().forecast_enrollment(trainees, [], [], 2)

    assert fit_trend_slope([4]) == 0.0
    assert {item.trend for item in forecasts} == {"stable"}
    assert forecasts[0].factors == ["Seasonal enrollment patterns"]
    assert forecasts[1].predicted_enrollment == 4


def test_resource_demand_with_no_trainees_still_projects_growth():
    predictions = _build_engine().predict_resource_demand([], [], 3)

    assert [item.resource_type for item in predictions] == [
        "computers",
        "internet_bandwidth",
        "power_consumption",
        "classroom_space",
    ]
    assert [item.current_demand for item in predictions] == [0, 0, 0, 0]
    # Baseline forecast totals 35 + 40 + 45 = 120 over three months.
    assert [item.predicted_demand for item in predictions] == [60, 96, 72, 48]
    assert [item.confidence for item in predictions] == [0.85, 0.80, 0.75, 0.90]
    assert all(item.period == "3 months" for item in predictions)
    assert all(len(item.recommendations) == 2 for item in predictions)


def test_resource_demand_rounds_current_headcount_up():
    trainees = [_trainee(index) for index in range(1, 4)]

    predictions = _build_engine().predict_resource_demand(trainees, [], 1)

    assert [item.current_demand for item in predictions] == [2, 3, 2, 2]


def test_gender_balance_share():
    trainees = [_trainee(1, gender="female"), _trainee(2, gender="Female"), _trainee(3, gender="male")]

    assert AnalyticsEngine.gender_balance(trainees) == pytest.approx(66.6667, rel=1e-4)
    assert AnalyticsEngine.gender_balance([]) == 0.0


def test_optimization_targets_use_placeholders_and_gaps():
    trainees = [_trainee(1, gender="female"), _trainee(2, gender="female"), _trainee(3, gender="male")]

    targets = _build_engine().compute_optimization_targets(trainees, [], [])

    by_metric = {item.metric: item for item in targets}
    assert list(by_metric) == [
        "completion_rate",
        "resource_utilization",
        "gender_balance",
        "employment_outcome",
    ]
    completion = by_metric["completion_rate"]
    assert (completion.current_value, completion.target_value, completion.improvement) == (75.0, 85.0, 10.0)
    assert completion.recommendations == []
    assert completion.priority == "medium"
    assert by_metric["resource_utilization"].priority == "medium"
    assert by_metric["employment_outcome"].priority == "medium"

    balance = by_metric["gender_balance"]
    assert balance.improvement == pytest.approx(16.6667, rel=1e-4)
    assert balance.recommendations == []
    assert balance.priority == "low"


def test_gender_balance_gap_above_threshold_is_high_priority():
    trainees = [_trainee(index, gender="male") for index in range(1, 5)]

    targets = _build_engine().compute_optimization_targets(trainees, [], [])

    balance = next(item for item in targets if item.metric == "gender_balance")
    assert balance.current_value == 0.0
    assert balance.improvement == 50.0
    assert balance.priority == "high"
    assert len(balance.recommendations) == 3


def test_predictive_metrics_bundle_uses_configured_horizons():
    settings = replace(
        get_settings(),
        forecast_default_horizon_months=4,
        resource_default_horizon_months=2,
        period_label_strategy="legacy",
    )
    engine = AnalyticsEngine(settings=settings)
    trainees = [_trainee(1, age=18), _trainee(2, age=50)]
    centres = [CentreRecord(centre_id=1, centre_name="Maiduguri Hub")]

    metrics = engine.compute_predictive_metrics(trainees, centres, COURSES, assessed_at=ASSESSED_AT)
    payload = metrics.to_dict()

    assert len(metrics.enrollment_forecast) == 4
    assert len(metrics.dropout_risks) == 2
    assert {item.period for item in metrics.resource_demand} == {"2 months"}
    assert len(metrics.performance_optimization) == 4
    assert payload["dropout_risks"][0]["last_assessment"] == ASSESSED_AT.isoformat()


def test_invalid_configuration_is_rejected():
    with pytest.raises(AnalyticsValidationError):
        _build_engine(period_label_strategy="weekly")
    with pytest.raises(AnalyticsValidationError):
        _build_engine(policy=ScoringPolicy(female_weight=-5))
    with pytest.raises(AnalyticsValidationError):
        _build_engine(bands=RiskBands(very_high=50, high=60))


def test_enrollment_months_follow_the_written_local_date():
    trainees = [
        _trainee(1, enrolled_at="2025-01-01"),
        _trainee(2, enrolled_at="2025-01-31T23:30:00-05:00"),
        _trainee(3, enrolled_at="2025-02-01 10:00:00"),
        _trainee(4, enrolled_at="2025-02-03T00:00:00.123Z"),
        _trainee(5, enrolled_at="20250301"),
    ]

    assert build_monthly_enrollment_series(trainees) == [2, 2, 1]


def test_explicit_zero_horizons_are_not_replaced_by_defaults():
    engine = _build_engine()

    metrics = engine.compute_predictive_metrics(
        [_trainee(1)],
        [],
        [],
        horizon_months=0,
        resource_horizon_months=0,
        assessed_at=ASSESSED_AT,
    )

    assert metrics.enrollment_forecast == []
    assert {item.predicted_demand for item in metrics.resource_demand} == {0}
    assert {item.period for item in metrics.resource_demand} == {"0 months"}
    assert len(metrics.dropout_risks) == 1
