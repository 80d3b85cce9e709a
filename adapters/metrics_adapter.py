"""Adapter for the learning-data metrics API → internal MetricsSnapshot.

Endpoint handled:
- GET /learning/students/{studentId}/metrics?gradeLevel=&days= → MetricsSnapshot

The backend groups counters by concern (engagement, performance, learning,
behavior, social).  Missing groups and null fields map to the snapshot's
zero defaults so the scoring pipeline never sees ``None``.
"""

from __future__ import annotations

import logging
from typing import Any

from models.metrics import BASELINE_DIFFICULTY, MetricsSnapshot
from services.learning_client import LearningDataClient

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response → Internal Model conversions
# ---------------------------------------------------------------------------

def _num(group: dict[str, Any], key: str, default: float = 0) -> Any:
    value = group.get(key)
    return default if value is None else value


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def _group(raw: dict[str, Any], key: str) -> dict[str, Any]:
    group = raw.get(key)
    if not isinstance(group, dict):
        if group is not None:
            logger.warning("metrics DTO: expected dict for %r, got %s", key, type(group))
        return {}
    return group


def parse_metrics(
    raw: dict[str, Any],
    student_id: str,
    grade_level: int,
    time_window_days: int,
) -> MetricsSnapshot:
    """Convert a backend ``StudentMetricsDTO`` to :class:`MetricsSnapshot`.

    Topic and review completion rates are derived from the counts when the
    backend omits them.
    """
    engagement = _group(raw, "engagement")
    performance = _group(raw, "performance")
    learning = _group(raw, "learning")
    behavior = _group(raw, "behavior")
    social = _group(raw, "social")

    topics_started = _num(learning, "topicsStarted")
    topics_completed = _num(learning, "topicsCompleted")
    reviews_completed = _num(learning, "reviewsCompleted")
    reviews_due = _num(learning, "reviewsDue")

    topic_rate = learning.get("topicCompletionRate")
    if topic_rate is None:
        topic_rate = _ratio(topics_completed, topics_started)
    review_rate = learning.get("reviewCompletionRate")
    if review_rate is None:
        review_rate = _ratio(reviews_completed, reviews_completed + reviews_due)

    fields: dict[str, Any] = dict(
        student_id=str(raw.get("studentId") or student_id),
        grade_level=raw.get("gradeLevel") or grade_level,
        time_window_days=raw.get("windowDays") or time_window_days,
        # engagement
        total_sessions=_num(engagement, "totalSessions"),
        average_session_length=_num(engagement, "averageSessionMinutes"),
        last_activity_at=engagement.get("lastActivityAt"),
        current_streak=_num(engagement, "currentStreak"),
        longest_streak=_num(engagement, "longestStreak"),
        session_completion_rate=_num(engagement, "sessionCompletionRate"),
        # performance
        total_attempts=_num(performance, "totalAttempts"),
        correct_attempts=_num(performance, "correctAttempts"),
        average_accuracy=_num(performance, "averageAccuracy"),
        recent_accuracy_trend=_num(performance, "accuracyTrend"),
        difficulty_level=_num(performance, "difficultyLevel", BASELINE_DIFFICULTY),
        # learning
        topics_started=topics_started,
        topics_completed=topics_completed,
        topic_completion_rate=topic_rate,
        reviews_completed=reviews_completed,
        reviews_due=reviews_due,
        review_completion_rate=review_rate,
        help_requests=_num(learning, "helpRequests"),
        hints_used=_num(learning, "hintsUsed"),
        time_per_question_ratio=_num(learning, "timePerQuestionRatio", 1.0),
        # behavioral
        interruptions=_num(behavior, "interruptions"),
        habits_completed=_num(behavior, "habitsCompleted"),
        habits_total=_num(behavior, "habitsTotal"),
        average_focus_score=_num(behavior, "averageFocusScore"),
        frustration_events=_num(behavior, "frustrationEvents"),
        # social
        group_participation=_num(social, "groupParticipation"),
        peer_help_given=_num(social, "peerHelpGiven"),
        peer_help_received=_num(social, "peerHelpReceived"),
        challenges_participated=_num(social, "challengesParticipated"),
        study_time_minutes=_num(raw, "studyTimeMinutes"),
    )
    captured_at = raw.get("capturedAt")
    if captured_at:
        fields["captured_at"] = captured_at
    return MetricsSnapshot(**fields)


# ---------------------------------------------------------------------------
# High-level API calls
# ---------------------------------------------------------------------------

async def get_student_metrics(
    client: LearningDataClient,
    student_id: str,
    grade_level: int,
    time_window_days: int,
) -> MetricsSnapshot:
    """Fetch aggregated metrics for one student.

    GET /learning/students/{studentId}/metrics?gradeLevel=&days=
    """
    resp = await client.get(
        f"/learning/students/{student_id}/metrics",
        params={"gradeLevel": grade_level, "days": time_window_days},
    )
    raw = _unwrap_data(resp)

    if not isinstance(raw, dict):
        logger.warning("get_student_metrics: expected dict, got %s", type(raw))
        return MetricsSnapshot.empty(student_id, grade_level, time_window_days)

    return parse_metrics(raw, student_id, grade_level, time_window_days)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _unwrap_data(response: Any) -> Any:
    """Extract ``data`` from the backend's ``Result<T>`` wrapper."""
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response
