"""Risk analysis output models.

Everything here is derived: recomputed on every analysis and serialized as
camelCase for dashboards and alerting consumers.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Union

from pydantic import Field

from models.base import CamelModel


# ── Enumerations ─────────────────────────────────────────────


class RiskCategory(str, Enum):
    """The five weighted risk dimensions."""

    ENGAGEMENT = "engagement"
    PERFORMANCE = "performance"
    LEARNING = "learning"
    BEHAVIORAL = "behavioral"
    SOCIAL = "social"


class RiskLevel(str, Enum):
    """Four-band classification of the overall score."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class FactorSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class InterventionPriority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PredictionType(str, Enum):
    GRADE = "grade"
    ENGAGEMENT = "engagement"
    MASTERY = "mastery"
    DROPOUT_RISK = "dropout-risk"


# Ascending rank = more urgent first.
PRIORITY_RANK: dict[InterventionPriority, int] = {
    InterventionPriority.URGENT: 0,
    InterventionPriority.HIGH: 1,
    InterventionPriority.MEDIUM: 2,
    InterventionPriority.LOW: 3,
}

# Ascending rank = less risky.  Used for monotonicity checks and sorting.
RISK_LEVEL_RANK: dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MODERATE: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


# ── Scoring ──────────────────────────────────────────────────


class CategoryScore(CamelModel):
    category: RiskCategory
    score: float  # 0 ~ 100
    weight: float
    weighted_score: float


class RiskFactor(CamelModel):
    """A weak category (score < 50) surfaced to teachers."""

    category: RiskCategory
    severity: FactorSeverity
    score: float
    description: str


class RiskAnalysis(CamelModel):
    """Output of the risk scorer for one snapshot."""

    overall_score: float
    level: RiskLevel
    category_scores: list[CategoryScore]
    factors: list[RiskFactor] = Field(default_factory=list)


# ── Predictions ──────────────────────────────────────────────


class Prediction(CamelModel):
    """A forward-looking outcome projection.

    ``value`` depends on ``type``: a letter grade, an engagement label,
    the number of remaining topics (mastery) or a dropout-risk band.
    """

    type: PredictionType
    timeframe_days: int
    value: Union[str, int]
    confidence: float
    basis: str
    projected: float | None = None  # grade only: projected accuracy


# ── Interventions & warnings ─────────────────────────────────


class InterventionAction(CamelModel):
    type: Literal["immediate", "schedule", "adjust", "monitor", "contact", "enable", "recommend"]
    action: str


class InterventionStrategy(CamelModel):
    priority: InterventionPriority
    title: str
    actions: list[InterventionAction]
    triggered_by_category: RiskCategory
    score: float
    implement_by_date: datetime


class EarlyWarning(CamelModel):
    type: str  # "engagement" | "performance" | "retention"
    severity: Literal["high", "medium"]
    message: str
    recommendation: str


class Trends(CamelModel):
    engagement: Literal["improving", "declining"]
    performance: Literal["improving", "declining"]
    learning: Literal["on-track", "behind"]


# ── Aggregates ───────────────────────────────────────────────


class StudentRiskAnalysis(CamelModel):
    """Root aggregate returned by ``analyze_student``."""

    student_id: str
    analyzed_at: datetime
    time_window_days: int
    risk_score: float
    risk_level: RiskLevel
    predictions: list[Prediction]
    risk_factors: list[RiskFactor]
    interventions: list[InterventionStrategy]
    confidence: float
    trends: Trends
    early_warnings: list[EarlyWarning]


class CohortReport(CamelModel):
    """Class/group-level summary returned by ``monitor_cohort``."""

    total_students: int
    at_risk: int
    critical_cases: list[StudentRiskAnalysis]
    needs_attention: list[StudentRiskAnalysis]
    average_risk_score: float
    analyses: list[StudentRiskAnalysis]


# ── API request bodies ───────────────────────────────────────


class AnalyzeStudentRequest(CamelModel):
    grade_level: int | None = None
    time_window_days: int | None = Field(default=None, ge=1, le=365)


class CohortRequest(CamelModel):
    student_ids: list[str] = Field(min_length=1)
    grade_level: int | None = None
    time_window_days: int | None = Field(default=None, ge=1, le=365)
