"""Risk profile store — latest analysis per student.

Holds one :class:`StudentRiskAnalysis` per student id; each ``put``
overwrites the previous entry (last write wins, no history).  The store is
owned by a :class:`services.risk_engine.RiskAnalysisEngine` instance, never
shared through module state.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from models.risk import StudentRiskAnalysis

logger = logging.getLogger(__name__)


# ── Abstract Interface ───────────────────────────────────────


class RiskProfileStore(ABC):
    """Abstract keyed store — implement for different backends."""

    @abstractmethod
    def get(self, student_id: str) -> StudentRiskAnalysis | None:
        """Latest analysis for a student, or None if never analysed."""
        ...

    @abstractmethod
    def put(self, analysis: StudentRiskAnalysis) -> None:
        """Store an analysis, replacing any previous one for the same student."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Number of students with a stored analysis."""
        ...


# ── In-Memory Implementation ────────────────────────────────


class InMemoryRiskProfileStore(RiskProfileStore):
    """Process-local dict store.

    Writes to different students never conflict; concurrent writes for the
    same student resolve to whichever ``put`` lands last.
    """

    def __init__(self) -> None:
        self._store: dict[str, StudentRiskAnalysis] = {}

    def get(self, student_id: str) -> StudentRiskAnalysis | None:
        return self._store.get(student_id)

    def put(self, analysis: StudentRiskAnalysis) -> None:
        self._store[analysis.student_id] = analysis

    def __len__(self) -> int:
        return len(self._store)
