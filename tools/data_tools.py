"""Data retrieval — fetch student metrics from the learning-data backend.

``fetch_student_metrics`` is the inbound collaborator of the risk engine:
it calls the adapter layer → LearningDataClient for real data.  When
``debug=true`` and ``USE_MOCK_DATA=true`` it serves mock data instead.
Otherwise backend failures are raised as :class:`errors.DataFetchError`
for the engine to absorb.
"""

from __future__ import annotations

import logging

from config.settings import get_settings
from errors import DataFetchError
from models.metrics import MetricsSnapshot
from services.mock_data import STUDENT_METRICS

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Mock fallback helpers
# ---------------------------------------------------------------------------

def _mock_student_metrics(
    student_id: str, grade_level: int, time_window_days: int
) -> MetricsSnapshot:
    from adapters.metrics_adapter import parse_metrics

    raw = STUDENT_METRICS.get(student_id)
    if raw is None:
        return MetricsSnapshot.empty(student_id, grade_level, time_window_days)
    return parse_metrics(raw, student_id, grade_level, time_window_days)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _should_use_mock() -> bool:
    settings = get_settings()
    return settings.debug and settings.use_mock_data


def _normalize_student_id(student_id: str | None) -> str:
    """Normalize an optional student id to a clean string."""
    if student_id is None:
        return ""
    sid = str(student_id).strip()
    if sid.lower() in {"none", "null", "undefined"}:
        return ""
    return sid


def _get_client():
    """Lazy import to avoid circular dependency at module load time."""
    from services.learning_client import get_learning_client
    return get_learning_client()


# ---------------------------------------------------------------------------
# Public collaborator
# ---------------------------------------------------------------------------

async def fetch_student_metrics(
    student_id: str, grade_level: int, time_window_days: int
) -> MetricsSnapshot:
    """Fetch one student's aggregated metrics over ``time_window_days``.

    Raises:
        DataFetchError: student id missing or backend unavailable.
    """
    student_id = _normalize_student_id(student_id)
    if not student_id:
        raise DataFetchError(student_id, "student_id is required")
    if _should_use_mock():
        return _mock_student_metrics(student_id, grade_level, time_window_days)

    try:
        from adapters.metrics_adapter import get_student_metrics
        client = _get_client()
        return await get_student_metrics(client, student_id, grade_level, time_window_days)
    except Exception as exc:
        logger.exception("fetch_student_metrics failed for %s", student_id)
        raise DataFetchError(student_id, str(exc)) from exc
