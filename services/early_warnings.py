"""Early warnings and trend labels read straight off the metrics snapshot.

Neither depends on the aggregate risk score: warnings exist to catch
fast-moving problems that a 30-day average would smooth over.
"""

from __future__ import annotations

from config.interventions import EARLY_WARNING_TEXTS
from models.metrics import MetricsSnapshot
from models.risk import EarlyWarning, Trends

ACCURACY_DECLINE_LIMIT = -10  # percentage points
REVIEW_COMPLETION_FLOOR = 0.5
REVIEW_BACKLOG_LIMIT = 10


def _warning(rule: str) -> EarlyWarning:
    type_, severity, message, recommendation = EARLY_WARNING_TEXTS[rule]
    return EarlyWarning(
        type=type_,
        severity=severity,
        message=message,
        recommendation=recommendation,
    )


def detect_early_warnings(snapshot: MetricsSnapshot) -> list[EarlyWarning]:
    """Apply every rule; all matches fire, in fixed rule order."""
    warnings: list[EarlyWarning] = []

    if snapshot.current_streak == 0:
        warnings.append(_warning("streak_broken"))

    if snapshot.recent_accuracy_trend < ACCURACY_DECLINE_LIMIT:
        warnings.append(_warning("accuracy_decline"))

    if (
        snapshot.review_completion_rate < REVIEW_COMPLETION_FLOOR
        and snapshot.reviews_due > REVIEW_BACKLOG_LIMIT
    ):
        warnings.append(_warning("reviews_piling_up"))

    return warnings


def analyze_trends(snapshot: MetricsSnapshot) -> Trends:
    return Trends(
        engagement="improving" if snapshot.current_streak > snapshot.longest_streak / 2 else "declining",
        performance="improving" if snapshot.recent_accuracy_trend > 0 else "declining",
        learning="on-track" if snapshot.topic_completion_rate > 0.6 else "behind",
    )
