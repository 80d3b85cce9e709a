"""Tests for adapters/ — learning-data API response → MetricsSnapshot mapping."""

from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock

from adapters.metrics_adapter import _unwrap_data, get_student_metrics, parse_metrics
from models.metrics import BASELINE_DIFFICULTY, MetricsSnapshot


# ---------------------------------------------------------------------------
# Sample learning-data API responses
# ---------------------------------------------------------------------------

METRICS_DTO = {
    "studentId": "stu-101",
    "gradeLevel": 7,
    "windowDays": 14,
    "capturedAt": "2026-02-28T12:00:00Z",
    "engagement": {
        "totalSessions": 10,
        "averageSessionMinutes": 22.5,
        "lastActivityAt": "2026-02-26T12:00:00Z",
        "currentStreak": 4,
        "longestStreak": 9,
        "sessionCompletionRate": 0.8,
    },
    "performance": {
        "totalAttempts": 120,
        "correctAttempts": 90,
        "averageAccuracy": 75.0,
        "accuracyTrend": -3.5,
        "difficultyLevel": 6,
    },
    "learning": {
        "topicsStarted": 8,
        "topicsCompleted": 5,
        "topicCompletionRate": 0.625,
        "reviewsCompleted": 12,
        "reviewsDue": 4,
        "reviewCompletionRate": 0.75,
        "helpRequests": 3,
        "hintsUsed": 7,
        "timePerQuestionRatio": 1.4,
    },
    "behavior": {
        "interruptions": 2,
        "habitsCompleted": 9,
        "habitsTotal": 14,
        "averageFocusScore": 72,
        "frustrationEvents": 1,
    },
    "social": {
        "groupParticipation": 3,
        "peerHelpGiven": 4,
        "peerHelpReceived": 2,
        "challengesParticipated": 1,
    },
    "studyTimeMinutes": 225,
}


# ---------------------------------------------------------------------------
# parse_metrics
# ---------------------------------------------------------------------------

class TestParseMetrics:

    def test_full_dto(self):
        snap = parse_metrics(METRICS_DTO, "ignored", 5, 30)

        assert isinstance(snap, MetricsSnapshot)
        assert snap.student_id == "stu-101"
        assert snap.grade_level == 7
        assert snap.time_window_days == 14
        assert snap.captured_at == datetime(2026, 2, 28, 12, tzinfo=timezone.utc)
        assert snap.average_session_length == 22.5
        assert snap.recent_accuracy_trend == -3.5
        assert snap.difficulty_level == 6
        assert snap.topic_completion_rate == 0.625
        assert snap.hints_used == 7
        assert snap.average_focus_score == 72
        assert snap.challenges_participated == 1
        assert snap.study_time_minutes == 225

    def test_days_since_last_activity_uses_capture_time(self):
        snap = parse_metrics(METRICS_DTO, "stu-101", 5, 30)
        assert snap.days_since_last_activity == pytest.approx(2)

    def test_request_values_fill_missing_header(self):
        snap = parse_metrics({}, "stu-9", 4, 21)
        assert (snap.student_id, snap.grade_level, snap.time_window_days) == ("stu-9", 4, 21)

    def test_missing_groups_become_defaults(self):
        snap = parse_metrics({"studentId": "stu-9"}, "stu-9", 5, 30)
        assert snap.total_sessions == 0
        assert snap.last_activity_at is None
        assert snap.difficulty_level == BASELINE_DIFFICULTY
        assert snap.time_per_question_ratio == 1.0
        assert snap.peer_help_given == 0

    def test_null_fields_become_defaults(self):
        raw = {
            "engagement": {"totalSessions": None, "currentStreak": None},
            "performance": {"difficultyLevel": None, "averageAccuracy": None},
            "learning": {"timePerQuestionRatio": None},
        }
        snap = parse_metrics(raw, "stu-9", 5, 30)
        assert snap.total_sessions == 0
        assert snap.current_streak == 0
        assert snap.difficulty_level == BASELINE_DIFFICULTY
        assert snap.average_accuracy == 0
        assert snap.time_per_question_ratio == 1.0

    def test_non_dict_group_ignored(self):
        snap = parse_metrics({"social": ["unexpected"]}, "stu-9", 5, 30)
        assert snap.group_participation == 0

    def test_rates_derived_when_absent(self):
        raw = {"learning": {"topicsStarted": 10, "topicsCompleted": 4, "reviewsCompleted": 6, "reviewsDue": 2}}
        snap = parse_metrics(raw, "stu-9", 5, 30)
        assert snap.topic_completion_rate == pytest.approx(0.4)
        assert snap.review_completion_rate == pytest.approx(0.75)

    def test_derived_rates_zero_without_counts(self):
        snap = parse_metrics({"learning": {}}, "stu-9", 5, 30)
        assert snap.topic_completion_rate == 0
        assert snap.review_completion_rate == 0

    def test_explicit_rates_win_over_counts(self):
        raw = {"learning": {"topicsStarted": 10, "topicsCompleted": 4, "topicCompletionRate": 0.9}}
        assert parse_metrics(raw, "stu-9", 5, 30).topic_completion_rate == 0.9


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def test_unwrap_data_result_envelope():
    assert _unwrap_data({"code": 200, "message": "ok", "data": {"a": 1}}) == {"a": 1}


def test_unwrap_data_passthrough():
    assert _unwrap_data({"a": 1}) == {"a": 1}
    assert _unwrap_data([1, 2]) == [1, 2]


# ---------------------------------------------------------------------------
# get_student_metrics with mocked client
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_student_metrics_calls_endpoint():
    client = MagicMock()
    client.get = AsyncMock(return_value={"code": 200, "data": METRICS_DTO})

    snap = await get_student_metrics(client, "stu-101", 7, 14)

    client.get.assert_awaited_once_with(
        "/learning/students/stu-101/metrics",
        params={"gradeLevel": 7, "days": 14},
    )
    assert snap.total_attempts == 120


@pytest.mark.asyncio
async def test_get_student_metrics_unexpected_payload_is_empty():
    client = MagicMock()
    client.get = AsyncMock(return_value={"code": 200, "data": None})

    snap = await get_student_metrics(client, "stu-101", 7, 14)
    assert (snap.student_id, snap.grade_level, snap.time_window_days) == ("stu-101", 7, 14)
    assert snap.total_sessions == 0


@pytest.mark.asyncio
async def test_get_student_metrics_propagates_client_errors():
    client = MagicMock()
    client.get = AsyncMock(side_effect=RuntimeError("boom"))

    with pytest.raises(RuntimeError, match="boom"):
        await get_student_metrics(client, "stu-101", 7, 14)
