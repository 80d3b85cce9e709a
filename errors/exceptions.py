"""Domain-specific exceptions for the risk analysis service.

These exceptions let the engine and API layers distinguish configuration
mistakes (fail fast at import) from per-student data problems (degrade and
keep going).
"""

from __future__ import annotations


class RiskEngineError(Exception):
    """Base class for risk engine errors."""


class RiskConfigError(RiskEngineError):
    """A static scoring table violates one of its invariants.

    Raised once at import time by ``config.risk_indicators`` and
    ``config.interventions``; every analysis depends on these tables, so the
    process must not start with a broken one.
    """

    def __init__(self, table: str, message: str) -> None:
        self.table = table
        super().__init__(f"Invalid {table} configuration: {message}")


class DataFetchError(RiskEngineError):
    """The learning-data backend could not produce a metrics snapshot.

    Carries the student id so the engine can log which analysis fell back
    to the zero-valued default snapshot.
    """

    def __init__(self, student_id: str, message: str) -> None:
        self.student_id = student_id
        super().__init__(f"Metrics fetch for student '{student_id}' failed: {message}")

