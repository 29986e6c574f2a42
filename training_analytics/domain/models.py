"""Domain records consumed and produced by the analytics engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class CourseRecord:
    course_id: int
    title: str


@dataclass(frozen=True)
class CentreRecord:
    centre_id: int
    centre_name: str
    lga: str = ""
    declared_capacity: int = 0
    usable_capacity: int = 0
    computers_present: int = 0
    computers_functional: int = 0
    power_available: bool = False
    internet_available: bool = False


@dataclass(frozen=True)
class TraineeRecord:
    trainee_id: int
    name: str
    age: Optional[int] = None
    gender: Optional[str] = None
    employment: Optional[str] = None
    education: Optional[str] = None
    course_id: Optional[int] = None
    centre_name: str = ""
    lga: str = ""
    cohort_number: int = 1
    enrolled_at: Optional[str] = None
    passed: bool = False
    failed: bool = False
    not_sat_for_exams: bool = False
    dropout: bool = False


INSTRUCTOR_STATUSES = ("pending", "approved", "revoked", "active")


@dataclass(frozen=True)
class InstructorRecord:
    instructor_id: int
    name: str
    email: str
    lga: str = ""
    technical_manager_name: str = ""
    phone_number: str = ""
    centre_name: str = ""
    status: str = "pending"


@dataclass(frozen=True)
class WeeklyReportRecord:
    """Centre activity for one ISO week, submitted by its technical manager."""

    report_id: int
    centre_name: str
    technical_manager_name: str
    week_number: int
    year: int
    comments: str = ""
    trainees_enrolled: int = 0
    trainees_completed: int = 0
    trainees_dropped: int = 0
    created_at: Optional[str] = None


@dataclass(frozen=True)
class MEReportRecord:
    """Monthly monitoring and evaluation summary for a centre."""

    report_id: int
    centre_name: str
    technical_manager_name: str
    month: int
    year: int
    comments: str = ""
    total_enrollment: int = 0
    total_completion: int = 0
    total_dropout: int = 0
    employment_rate: float = 0.0
    created_at: Optional[str] = None


@dataclass(frozen=True)
class EnrollmentForecast:
    period: str
    predicted_enrollment: int
    confidence: float
    trend: str
    factors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "predicted_enrollment": self.predicted_enrollment,
            "confidence": self.confidence,
            "trend": self.trend,
            "factors": list(self.factors),
        }


@dataclass(frozen=True)
class DropoutRiskAssessment:
    trainee_id: int
    trainee_name: str
    risk_level: str
    risk_score: int
    risk_factors: list[str]
    recommendations: list[str]
    last_assessment: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "trainee_id": self.trainee_id,
            "trainee_name": self.trainee_name,
            "risk_level": self.risk_level,
            "risk_score": self.risk_score,
            "risk_factors": list(self.risk_factors),
            "recommendations": list(self.recommendations),
            "last_assessment": self.last_assessment.isoformat(),
        }


@dataclass(frozen=True)
class ResourceDemandPrediction:
    resource_type: str
    current_demand: int
    predicted_demand: int
    confidence: float
    period: str
    recommendations: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_type": self.resource_type,
            "current_demand": self.current_demand,
            "predicted_demand": self.predicted_demand,
            "confidence": self.confidence,
            "period": self.period,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class PerformanceOptimization:
    metric: str
    current_value: float
    target_value: float
    improvement: float
    recommendations: list[str]
    priority: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "current_value": self.current_value,
            "target_value": self.target_value,
            "improvement": self.improvement,
            "recommendations": list(self.recommendations),
            "priority": self.priority,
        }


@dataclass(frozen=True)
class PredictiveMetrics:
    enrollment_forecast: list[EnrollmentForecast]
    dropout_risks: list[DropoutRiskAssessment]
    resource_demand: list[ResourceDemandPrediction]
    performance_optimization: list[PerformanceOptimization]

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "enrollment_forecast": [item.to_dict() for item in self.enrollment_forecast],
            "dropout_risks": [item.to_dict() for item in self.dropout_risks],
            "resource_demand": [item.to_dict() for item in self.resource_demand],
            "performance_optimization": [
                item.to_dict() for item in self.performance_optimization
            ],
        }
