"""Risk scoring — factor evaluation, category scores and the overall risk level.

Scores run 0 ~ 100 where 0 is maximum risk and 100 is no risk:

- a factor at or past its ``critical`` bound scores 0
- between ``critical`` and ``threshold`` it interpolates linearly to 50
- past ``threshold`` it earns a bonus proportional to the distance, capped at 100

A category is the unweighted mean of its factors; the overall score is the
weight-sum of the five categories.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from config.risk_indicators import FACTOR_DESCRIPTIONS, RISK_INDICATORS
from errors import RiskConfigError
from models.metrics import BASELINE_DIFFICULTY, MetricsSnapshot
from models.risk import (
    CategoryScore,
    FactorSeverity,
    RiskAnalysis,
    RiskCategory,
    RiskFactor,
    RiskLevel,
)

logger = logging.getLogger(__name__)

WEAK_CATEGORY_SCORE = 50  # categories below this become risk factors
CRITICAL_CATEGORY_SCORE = 25


# ---------------------------------------------------------------------------
# Factor values: factor name → value derived from the snapshot
# ---------------------------------------------------------------------------

FACTOR_VALUES: dict[str, Callable[[MetricsSnapshot], float]] = {
    # engagement
    "streakLength": lambda s: s.current_streak,
    "sessionFrequency": lambda s: s.session_frequency,
    "sessionCompletion": lambda s: s.session_completion_rate,
    "lastActivityDays": lambda s: s.days_since_last_activity,
    # performance
    "averageAccuracy": lambda s: s.average_accuracy,
    "recentAccuracyTrend": lambda s: s.recent_accuracy_trend,
    "failureRate": lambda s: s.failure_rate,
    "difficultyProgression": lambda s: s.difficulty_level - BASELINE_DIFFICULTY,
    # learning
    "topicCompletionRate": lambda s: s.topic_completion_rate,
    "reviewCompletion": lambda s: s.review_completion_rate,
    "helpRequestFrequency": lambda s: s.help_requests / max(s.total_sessions, 1),
    "timePerQuestion": lambda s: s.time_per_question_ratio,
    # behavioral
    "interruptionRate": lambda s: s.interruptions / max(s.total_sessions, 1),
    "habitCompletionRate": lambda s: s.habits_completed / max(s.habits_total, 1),
    "focusScore": lambda s: s.average_focus_score,
    "frustrationIndicators": lambda s: s.frustration_events / max(s.total_sessions, 1),
    # social
    "peerInteraction": lambda s: (
        s.group_participation + s.peer_help_given + s.peer_help_received
    ) / 10,
    "collaborationScore": lambda s: min(100, s.group_participation * 20),
    "helpGiven": lambda s: s.peer_help_given / max(s.total_sessions, 1),
}


def _check_factor_coverage() -> None:
    for category, cfg in RISK_INDICATORS.items():
        for name in cfg["factors"]:
            if name not in FACTOR_VALUES:
                raise RiskConfigError(
                    "risk indicator",
                    f"{category.value}.{name} has no value mapping",
                )


_check_factor_coverage()


def get_factor_value(snapshot: MetricsSnapshot, factor: str) -> float:
    """Derive a factor's raw value; unknown factors and NaN readings count as 0."""
    getter = FACTOR_VALUES.get(factor)
    if getter is None:
        return 0.0
    value = float(getter(snapshot))
    return 0.0 if math.isnan(value) else value


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def evaluate_factor(value: float, threshold: float, critical: float) -> float:
    """Normalize a "higher is better" value against its bounds into 0 ~ 100.

    ``threshold == critical`` degrades to a step: anything above scores 100.
    A zero threshold gives the full bonus to any value above it.  NaN is
    read as an absent value, i.e. 0.
    """
    if math.isnan(value):
        value = 0.0
    if threshold == critical:
        return 100.0 if value > critical else 0.0
    if value <= critical:
        return 0.0
    if value <= threshold:
        return (value - critical) / (threshold - critical) * 50
    scale = abs(threshold)
    if scale == 0:
        return 100.0
    return 50 + min(50.0, (value - threshold) / scale * 50)


def evaluate_directed(value: float, bounds: dict) -> float:
    """Evaluate a factor honouring its ``direction``.

    "lower is better" factors are mirrored by negation so that
    :func:`evaluate_factor` only ever sees "higher is better".
    """
    threshold, critical = bounds["threshold"], bounds["critical"]
    if bounds.get("direction", "higher") == "lower":
        return evaluate_factor(-value, -threshold, -critical)
    return evaluate_factor(value, threshold, critical)


def score_category(snapshot: MetricsSnapshot, factors: dict[str, dict]) -> float:
    """Mean factor score for one category; 0 when no factors are configured."""
    if not factors:
        return 0.0
    total = sum(
        evaluate_directed(get_factor_value(snapshot, name), bounds)
        for name, bounds in factors.items()
    )
    return total / len(factors)


def determine_risk_level(score: float) -> RiskLevel:
    if score >= 80:
        return RiskLevel.LOW
    if score >= 60:
        return RiskLevel.MODERATE
    if score >= 40:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def describe_factor(category: RiskCategory, severity: FactorSeverity) -> str:
    texts = FACTOR_DESCRIPTIONS.get(category)
    if texts is None:
        return "Concern detected"
    critical_text, warning_text = texts
    return critical_text if severity == FactorSeverity.CRITICAL else warning_text


def identify_risk_factors(category_scores: list[CategoryScore]) -> list[RiskFactor]:
    """Weak categories, most severe first (stable for equal scores)."""
    factors: list[RiskFactor] = []
    for cs in category_scores:
        if cs.score >= WEAK_CATEGORY_SCORE:
            continue
        severity = (
            FactorSeverity.CRITICAL
            if cs.score < CRITICAL_CATEGORY_SCORE
            else FactorSeverity.WARNING
        )
        factors.append(RiskFactor(
            category=cs.category,
            severity=severity,
            score=cs.score,
            description=describe_factor(cs.category, severity),
        ))
    return sorted(factors, key=lambda f: f.score)


def score_risk(
    snapshot: MetricsSnapshot,
    indicators: dict[RiskCategory, dict] | None = None,
) -> RiskAnalysis:
    """Score every category and combine them into a :class:`RiskAnalysis`."""
    indicators = RISK_INDICATORS if indicators is None else indicators

    category_scores: list[CategoryScore] = []
    overall = 0.0
    for category, cfg in indicators.items():
        score = score_category(snapshot, cfg.get("factors", {}))
        weighted = score * cfg["weight"]
        category_scores.append(CategoryScore(
            category=category,
            score=score,
            weight=cfg["weight"],
            weighted_score=weighted,
        ))
        overall += weighted

    level = determine_risk_level(overall)
    logger.debug(
        "Risk scored for %s: %.2f (%s)",
        snapshot.student_id or "<anonymous>", overall, level.value,
    )
    return RiskAnalysis(
        overall_score=overall,
        level=level,
        category_scores=category_scores,
        factors=identify_risk_factors(category_scores),
    )
