"""Shared pytest fixtures for risk engine tests.

Provides:
- ``fixed_now`` / ``clock``: a frozen analysis timestamp
- ``struggling`` / ``borderline`` / ``thriving``: representative snapshots
- ``profile_store``: fresh InMemoryRiskProfileStore per test
- ``make_engine``: builds a RiskAnalysisEngine over an in-memory fetcher
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from models.metrics import MetricsSnapshot
from services.risk_engine import RiskAnalysisEngine
from services.risk_store import InMemoryRiskProfileStore
from tests.snapshots import borderline_snapshot, struggling_snapshot, thriving_snapshot

FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def struggling() -> MetricsSnapshot:
    return struggling_snapshot()


@pytest.fixture
def borderline() -> MetricsSnapshot:
    return borderline_snapshot()


@pytest.fixture
def thriving() -> MetricsSnapshot:
    return thriving_snapshot()


@pytest.fixture
def profile_store() -> InMemoryRiskProfileStore:
    """Fresh store — isolated per test."""
    return InMemoryRiskProfileStore()


@pytest.fixture
def make_engine(profile_store, clock):
    """Factory: engine whose fetcher serves ``snapshots`` by student id.

    Students missing from ``snapshots`` make the fetcher raise, which
    exercises the zero-snapshot fallback.
    """

    def _make(snapshots: dict[str, MetricsSnapshot], calls: list | None = None):
        async def fetch(student_id: str, grade_level: int, time_window_days: int):
            if calls is not None:
                calls.append((student_id, grade_level, time_window_days))
            if student_id not in snapshots:
                raise ConnectionError(f"backend down for {student_id}")
            return snapshots[student_id]

        return RiskAnalysisEngine(
            fetch_metrics=fetch,
            store=profile_store,
            max_concurrency=2,
            clock=clock,
        )

    return _make
