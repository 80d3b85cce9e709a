"""Outcome projections — grade, engagement, mastery timeline and dropout risk.

Each projection is a fixed heuristic over the snapshot (and, for dropout,
the overall risk score).  Confidence values reflect how much history backs
the projection, not measured accuracy.
"""

from __future__ import annotations

import math

from models.metrics import MetricsSnapshot
from models.risk import Prediction, PredictionType, RiskAnalysis

GRADE_HORIZON_DAYS = 30
ENGAGEMENT_HORIZON_DAYS = 7
DROPOUT_HORIZON_DAYS = 90

# (minimum projected accuracy, letter), checked top-down.
GRADE_BANDS: list[tuple[float, str]] = [(90, "A"), (80, "B"), (70, "C"), (60, "D")]


def predict_grade(snapshot: MetricsSnapshot, horizon_days: int = GRADE_HORIZON_DAYS) -> Prediction:
    """Linear projection of accuracy, mapped to a letter grade."""
    projected = snapshot.average_accuracy + snapshot.recent_accuracy_trend * (horizon_days / 7)
    grade = next((letter for floor, letter in GRADE_BANDS if projected >= floor), "F")
    return Prediction(
        type=PredictionType.GRADE,
        timeframe_days=horizon_days,
        value=grade,
        projected=projected,
        confidence=0.85 if snapshot.total_attempts > 50 else 0.6,
        basis="Current accuracy and performance trends",
    )


def predict_engagement(
    snapshot: MetricsSnapshot, horizon_days: int = ENGAGEMENT_HORIZON_DAYS
) -> Prediction:
    streak = snapshot.current_streak
    frequency = snapshot.session_frequency

    if streak >= 7 and frequency >= 0.8:
        level = "highly-engaged"
    elif streak >= 3 and frequency >= 0.5:
        level = "engaged"
    elif streak >= 1 and frequency >= 0.3:
        level = "moderately-engaged"
    else:
        level = "at-risk"

    return Prediction(
        type=PredictionType.ENGAGEMENT,
        timeframe_days=horizon_days,
        value=level,
        confidence=0.8 if snapshot.total_sessions > 20 else 0.5,
        basis="Recent activity patterns and streaks",
    )


def predict_mastery(snapshot: MetricsSnapshot) -> Prediction:
    """Days until the started-but-unfinished topics are completed.

    Without a completion rate or remaining topics there is nothing to
    project: the prediction reports 0 days at 0.3 confidence.
    """
    remaining = snapshot.remaining_topics
    basis = "Current learning pace and topic completion rate"

    if snapshot.topic_completion_rate == 0 or remaining <= 0:
        return Prediction(
            type=PredictionType.MASTERY,
            timeframe_days=0,
            value=0,
            confidence=0.3,
            basis=basis,
        )

    days_per_topic = max(snapshot.time_window_days, 1) / max(snapshot.topics_completed, 1)
    return Prediction(
        type=PredictionType.MASTERY,
        timeframe_days=math.ceil(remaining * days_per_topic),
        value=remaining,
        confidence=0.75 if snapshot.topics_completed > 5 else 0.5,
        basis=basis,
    )


def predict_dropout_risk(
    snapshot: MetricsSnapshot,
    risk: RiskAnalysis,
    horizon_days: int = DROPOUT_HORIZON_DAYS,
) -> Prediction:
    score = risk.overall_score
    if score < 30:
        band = "high"
    elif score < 50:
        band = "moderate"
    elif score < 70:
        band = "low"
    else:
        band = "very-low"

    return Prediction(
        type=PredictionType.DROPOUT_RISK,
        timeframe_days=horizon_days,
        value=band,
        confidence=0.8 if snapshot.total_sessions > 30 else 0.6,
        basis="Engagement trends and behavioral indicators",
    )


def predict_outcomes(snapshot: MetricsSnapshot, risk: RiskAnalysis) -> list[Prediction]:
    """All four projections, always in grade/engagement/mastery/dropout order."""
    return [
        predict_grade(snapshot),
        predict_engagement(snapshot),
        predict_mastery(snapshot),
        predict_dropout_risk(snapshot, risk),
    ]
