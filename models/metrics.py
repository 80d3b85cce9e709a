"""Per-student metrics snapshot — the only input the risk engine consumes.

A snapshot aggregates one student's activity counters over a
``time_window_days`` window.  It is produced by the learning-data adapter
(see ``adapters/metrics_adapter.py``) and never mutated afterwards.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import ConfigDict, Field

from models.base import CamelModel

# Stand-in for "days since last activity" when the student was never active.
NEVER_ACTIVE_DAYS = 999.0

# Difficulty level every student starts at; progression is measured from here.
BASELINE_DIFFICULTY = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MetricsSnapshot(CamelModel):
    """Aggregated, point-in-time learning metrics for one student."""

    model_config = ConfigDict(frozen=True)

    student_id: str = ""
    grade_level: int = 0
    time_window_days: int = 30
    captured_at: datetime = Field(default_factory=_utcnow)

    # ── Engagement ───────────────────────────────────────────
    total_sessions: int = 0
    average_session_length: float = 0  # minutes
    last_activity_at: datetime | None = None
    current_streak: int = 0
    longest_streak: int = 0
    session_completion_rate: float = 0  # 0.0 ~ 1.0

    # ── Performance ──────────────────────────────────────────
    total_attempts: int = 0
    correct_attempts: int = 0
    average_accuracy: float = 0  # 0 ~ 100
    recent_accuracy_trend: float = 0  # percentage-point change
    difficulty_level: float = BASELINE_DIFFICULTY

    # ── Learning ─────────────────────────────────────────────
    topics_started: int = 0
    topics_completed: int = 0
    topic_completion_rate: float = 0
    reviews_completed: int = 0
    reviews_due: int = 0
    review_completion_rate: float = 0
    help_requests: int = 0
    hints_used: int = 0
    time_per_question_ratio: float = 1.0  # multiple of expected time

    # ── Behavioral ───────────────────────────────────────────
    interruptions: int = 0
    habits_completed: int = 0
    habits_total: int = 0
    average_focus_score: float = 0  # 0 ~ 100
    frustration_events: int = 0

    # ── Social ───────────────────────────────────────────────
    group_participation: int = 0
    peer_help_given: int = 0
    peer_help_received: int = 0
    challenges_participated: int = 0

    study_time_minutes: float = 0

    @classmethod
    def empty(
        cls,
        student_id: str,
        grade_level: int = 0,
        time_window_days: int = 30,
    ) -> MetricsSnapshot:
        """Zero-valued snapshot used when metrics cannot be fetched."""
        return cls(
            student_id=student_id,
            grade_level=grade_level,
            time_window_days=time_window_days,
        )

    # ── Derived values ───────────────────────────────────────

    @property
    def session_frequency(self) -> float:
        """Sessions per day over the window."""
        return self.total_sessions / max(self.time_window_days, 1)

    @property
    def days_since_last_activity(self) -> float:
        """Days between the last activity and the capture time."""
        if self.last_activity_at is None:
            return NEVER_ACTIVE_DAYS
        last = self.last_activity_at
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        captured = self.captured_at
        if captured.tzinfo is None:
            captured = captured.replace(tzinfo=timezone.utc)
        return max((captured - last).total_seconds() / 86400, 0.0)

    @property
    def failure_rate(self) -> float:
        return 1 - self.correct_attempts / max(self.total_attempts, 1)

    @property
    def remaining_topics(self) -> int:
        return self.topics_started - self.topics_completed
