"""Risk analysis engine — sequences the scoring pipeline per student and per cohort.

Pipeline for one student::

    fetch metrics ─→ score_risk ─┬→ predict_outcomes
                                 ├→ generate_interventions
                                 └→ (assemble) ←─ detect_early_warnings,
                                                  estimate_confidence,
                                                  analyze_trends

Everything after the fetch is pure and synchronous.  The fetch is the only
await point; a failed fetch is logged and replaced by a zero-valued
snapshot so one student's data gap never aborts a cohort report.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from config.settings import get_settings
from models.metrics import MetricsSnapshot
from models.risk import RISK_LEVEL_RANK, CohortReport, RiskLevel, StudentRiskAnalysis
from services.concurrency import limited_call
from services.confidence import estimate_confidence
from services.early_warnings import analyze_trends, detect_early_warnings
from services.interventions import generate_interventions
from services.outcome_predictor import predict_outcomes
from services.risk_scoring import score_risk
from services.risk_store import InMemoryRiskProfileStore, RiskProfileStore

logger = logging.getLogger(__name__)

MetricsFetcher = Callable[[str, int, int], Awaitable[MetricsSnapshot]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RiskAnalysisEngine:
    """Per-service risk engine owning its profile store.

    Args:
        fetch_metrics: async ``(student_id, grade_level, time_window_days)``
            → :class:`MetricsSnapshot`.  Defaults to
            :func:`tools.data_tools.fetch_student_metrics`.
        store: keyed store for the latest analysis per student.
        max_concurrency: cap on concurrent fetches during cohort monitoring.
        clock: returns the analysis timestamp (injectable for tests).
    """

    def __init__(
        self,
        fetch_metrics: MetricsFetcher | None = None,
        store: RiskProfileStore | None = None,
        max_concurrency: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        settings = get_settings()
        if fetch_metrics is None:
            from tools.data_tools import fetch_student_metrics
            fetch_metrics = fetch_student_metrics
        self._fetch_metrics = fetch_metrics
        self.store = store if store is not None else InMemoryRiskProfileStore()
        self._max_concurrency = max_concurrency or settings.cohort_max_concurrency
        self._default_grade_level = settings.default_grade_level
        self._default_window = settings.default_time_window_days
        self._clock = clock or _utcnow

    # -- single student ------------------------------------------------------

    def analyze_snapshot(self, student_id: str, snapshot: MetricsSnapshot) -> StudentRiskAnalysis:
        """Run the pure pipeline over ``snapshot`` and store the result."""
        now = self._clock()
        risk = score_risk(snapshot)

        analysis = StudentRiskAnalysis(
            student_id=student_id,
            analyzed_at=now,
            time_window_days=snapshot.time_window_days,
            risk_score=risk.overall_score,
            risk_level=risk.level,
            predictions=predict_outcomes(snapshot, risk),
            risk_factors=risk.factors,
            interventions=generate_interventions(risk.factors, now=now),
            confidence=estimate_confidence(snapshot),
            trends=analyze_trends(snapshot),
            early_warnings=detect_early_warnings(snapshot),
        )
        self.store.put(analysis)
        logger.log(
            logging.WARNING if _is_at_risk(analysis) else logging.INFO,
            "Analyzed student %s: score=%.1f level=%s factors=%d warnings=%d",
            student_id, analysis.risk_score, analysis.risk_level.value,
            len(analysis.risk_factors), len(analysis.early_warnings),
        )
        return analysis

    async def analyze_student(
        self,
        student_id: str,
        grade_level: int | None = None,
        time_window_days: int | None = None,
        *,
        semaphore: asyncio.Semaphore | None = None,
    ) -> StudentRiskAnalysis:
        """Fetch metrics for ``student_id`` and analyse them."""
        grade_level = self._default_grade_level if grade_level is None else grade_level
        time_window_days = time_window_days or self._default_window
        snapshot = await self._acquire(student_id, grade_level, time_window_days, semaphore)
        return self.analyze_snapshot(student_id, snapshot)

    async def _acquire(
        self,
        student_id: str,
        grade_level: int,
        time_window_days: int,
        semaphore: asyncio.Semaphore | None,
    ) -> MetricsSnapshot:
        try:
            if semaphore is not None:
                return await limited_call(
                    semaphore, self._fetch_metrics, student_id, grade_level, time_window_days
                )
            return await self._fetch_metrics(student_id, grade_level, time_window_days)
        except Exception:
            logger.warning(
                "Metrics unavailable for student %s, analysing zero-valued snapshot",
                student_id,
                exc_info=True,
            )
            return MetricsSnapshot.empty(student_id, grade_level, time_window_days)

    def get_risk_profile(self, student_id: str) -> StudentRiskAnalysis | None:
        """Latest stored analysis for a student, if any."""
        return self.store.get(student_id)

    # -- cohort --------------------------------------------------------------

    async def monitor_cohort(
        self,
        student_ids: list[str],
        grade_level: int | None = None,
        time_window_days: int | None = None,
    ) -> CohortReport:
        """Analyse every student concurrently, then summarise the cohort."""
        semaphore = asyncio.Semaphore(self._max_concurrency)
        analyses = await asyncio.gather(*(
            self.analyze_student(
                sid, grade_level, time_window_days, semaphore=semaphore,
            )
            for sid in student_ids
        ))
        report = build_cohort_report(list(analyses))
        logger.info(
            "Cohort of %d analysed: at_risk=%d critical=%d avg=%.1f (profiles stored: %d)",
            report.total_students, report.at_risk,
            len(report.critical_cases), report.average_risk_score, len(self.store),
        )
        return report


def _is_at_risk(analysis: StudentRiskAnalysis) -> bool:
    return RISK_LEVEL_RANK[analysis.risk_level] >= RISK_LEVEL_RANK[RiskLevel.HIGH]


def build_cohort_report(analyses: list[StudentRiskAnalysis]) -> CohortReport:
    """Summarise completed analyses; an empty cohort averages to 0."""
    critical = [a for a in analyses if a.risk_level == RiskLevel.CRITICAL]
    high = [a for a in analyses if a.risk_level == RiskLevel.HIGH]
    average = sum(a.risk_score for a in analyses) / len(analyses) if analyses else 0.0
    return CohortReport(
        total_students=len(analyses),
        at_risk=sum(1 for a in analyses if _is_at_risk(a)),
        critical_cases=critical,
        needs_attention=high,
        average_risk_score=average,
        analyses=analyses,
    )
