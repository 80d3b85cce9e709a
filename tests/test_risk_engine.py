"""Tests for services/risk_engine.py — single-student pipeline and cohort monitoring."""

from __future__ import annotations

import asyncio

import pytest

from models.metrics import MetricsSnapshot
from models.risk import InterventionPriority, PredictionType, RiskCategory, RiskLevel
from services.risk_engine import RiskAnalysisEngine, build_cohort_report
from tests.snapshots import borderline_snapshot, struggling_snapshot, thriving_snapshot


# =========================================================================
# Single student
# =========================================================================

class TestAnalyzeStudent:

    @pytest.mark.asyncio
    async def test_struggling_student(self, make_engine, struggling, fixed_now):
        engine = make_engine({"s-1": struggling})
        analysis = await engine.analyze_student("s-1")

        assert analysis.student_id == "s-1"
        assert analysis.analyzed_at == fixed_now
        assert analysis.risk_level == RiskLevel.CRITICAL
        assert analysis.risk_factors[0].category == RiskCategory.ENGAGEMENT
        assert analysis.risk_factors[0].score == 0
        assert analysis.interventions[0].priority == InterventionPriority.URGENT
        messages = {w.message for w in analysis.early_warnings}
        assert "Streak broken - student may disengage" in messages
        assert "Sharp decline in accuracy detected" in messages

    @pytest.mark.asyncio
    async def test_thriving_student(self, make_engine, thriving):
        engine = make_engine({"s-1": thriving})
        analysis = await engine.analyze_student("s-1")

        assert analysis.risk_score >= 80
        assert analysis.risk_level == RiskLevel.LOW
        assert analysis.risk_factors == []
        assert analysis.interventions == []
        assert analysis.early_warnings == []
        assert analysis.confidence == pytest.approx(0.85)

    @pytest.mark.asyncio
    async def test_predictions_in_fixed_order(self, make_engine, borderline):
        analysis = await make_engine({"s-1": borderline}).analyze_student("s-1")
        assert [p.type for p in analysis.predictions] == [
            PredictionType.GRADE,
            PredictionType.ENGAGEMENT,
            PredictionType.MASTERY,
            PredictionType.DROPOUT_RISK,
        ]

    @pytest.mark.asyncio
    async def test_deterministic_for_same_input(self, make_engine, borderline):
        engine = make_engine({"s-1": borderline})
        first = await engine.analyze_student("s-1")
        second = await engine.analyze_student("s-1")
        assert first.model_dump() == second.model_dump()

    @pytest.mark.asyncio
    async def test_passes_grade_and_window_to_fetcher(self, make_engine, thriving):
        calls: list = []
        engine = make_engine({"s-1": thriving}, calls=calls)
        await engine.analyze_student("s-1", grade_level=8, time_window_days=14)
        assert calls == [("s-1", 8, 14)]

    @pytest.mark.asyncio
    async def test_defaults_from_settings(self, make_engine, thriving):
        calls: list = []
        engine = make_engine({"s-1": thriving}, calls=calls)
        await engine.analyze_student("s-1")
        assert calls == [("s-1", 5, 30)]

    @pytest.mark.asyncio
    async def test_fetch_failure_falls_back_to_zero_snapshot(self, make_engine, caplog):
        engine = make_engine({})
        with caplog.at_level("WARNING", logger="services.risk_engine"):
            analysis = await engine.analyze_student("ghost", time_window_days=7)

        assert analysis.student_id == "ghost"
        assert analysis.time_window_days == 7
        assert analysis.risk_level == RiskLevel.CRITICAL
        assert analysis.confidence == pytest.approx(0.5)
        assert "ghost" in caplog.text

    def test_at_risk_analysis_logged_as_warning(self, make_engine, struggling, thriving, caplog):
        engine = make_engine({})
        with caplog.at_level("INFO", logger="services.risk_engine"):
            engine.analyze_snapshot("s-bad", struggling)
            engine.analyze_snapshot("s-good", thriving)

        levels = {r.getMessage().split(":")[0]: r.levelname for r in caplog.records}
        assert levels["Analyzed student s-bad"] == "WARNING"
        assert levels["Analyzed student s-good"] == "INFO"

    def test_analyze_snapshot_is_synchronous(self, make_engine, thriving):
        engine = make_engine({})
        analysis = engine.analyze_snapshot("s-9", thriving)
        assert analysis.risk_level == RiskLevel.LOW
        assert engine.get_risk_profile("s-9") is analysis


# =========================================================================
# Profile store
# =========================================================================

class TestRiskProfile:

    @pytest.mark.asyncio
    async def test_profile_stored_after_analysis(self, make_engine, thriving, profile_store):
        engine = make_engine({"s-1": thriving})
        assert engine.get_risk_profile("s-1") is None

        analysis = await engine.analyze_student("s-1")
        assert engine.get_risk_profile("s-1") == analysis
        assert len(profile_store) == 1

    @pytest.mark.asyncio
    async def test_latest_analysis_wins(self, make_engine, thriving, struggling):
        snapshots = {"s-1": thriving}
        engine = make_engine(snapshots)
        await engine.analyze_student("s-1")

        snapshots["s-1"] = struggling
        await engine.analyze_student("s-1")
        assert engine.get_risk_profile("s-1").risk_level == RiskLevel.CRITICAL

    def test_engines_do_not_share_stores(self, clock):
        async def never_called(*_args):
            raise AssertionError("fetch not expected")

        a = RiskAnalysisEngine(fetch_metrics=never_called, clock=clock)
        b = RiskAnalysisEngine(fetch_metrics=never_called, clock=clock)
        a.analyze_snapshot("s-1", thriving_snapshot())
        assert b.get_risk_profile("s-1") is None


# =========================================================================
# Cohort
# =========================================================================

class TestMonitorCohort:

    @pytest.mark.asyncio
    async def test_mixed_cohort_summary(self, make_engine):
        engine = make_engine({
            "crit": struggling_snapshot(),
            "high": borderline_snapshot(),
            "low": thriving_snapshot(),
        })
        report = await engine.monitor_cohort(["crit", "high", "low"])

        assert report.total_students == 3
        assert report.at_risk == 2
        assert [a.student_id for a in report.critical_cases] == ["crit"]
        assert [a.student_id for a in report.needs_attention] == ["high"]
        assert report.average_risk_score == pytest.approx(
            sum(a.risk_score for a in report.analyses) / 3
        )

    @pytest.mark.asyncio
    async def test_analyses_keep_input_order(self, make_engine):
        engine = make_engine({sid: thriving_snapshot(sid) for sid in ("c", "a", "b")})
        report = await engine.monitor_cohort(["c", "a", "b"])
        assert [a.student_id for a in report.analyses] == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_empty_cohort(self, make_engine):
        report = await make_engine({}).monitor_cohort([])
        assert report.total_students == 0
        assert report.at_risk == 0
        assert report.average_risk_score == 0

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_cohort(self, make_engine):
        engine = make_engine({"ok": thriving_snapshot("ok")})
        report = await engine.monitor_cohort(["ok", "missing"])
        assert report.total_students == 2
        assert [a.student_id for a in report.critical_cases] == ["missing"]

    @pytest.mark.asyncio
    async def test_every_student_stored(self, make_engine, profile_store):
        engine = make_engine({sid: thriving_snapshot(sid) for sid in ("a", "b", "c")})
        await engine.monitor_cohort(["a", "b", "c"])
        assert len(profile_store) == 3

    @pytest.mark.asyncio
    async def test_summary_log_reports_stored_profiles(self, make_engine, caplog):
        engine = make_engine({sid: thriving_snapshot(sid) for sid in ("a", "b")})
        with caplog.at_level("INFO", logger="services.risk_engine"):
            await engine.monitor_cohort(["a", "b"])
        assert "profiles stored: 2" in caplog.text

    @pytest.mark.asyncio
    async def test_fetch_concurrency_capped(self, clock):
        in_flight = 0
        peak = 0

        async def slow_fetch(student_id, grade_level, time_window_days):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return thriving_snapshot(student_id)

        engine = RiskAnalysisEngine(fetch_metrics=slow_fetch, max_concurrency=3, clock=clock)
        report = await engine.monitor_cohort([f"s-{i}" for i in range(10)])

        assert report.total_students == 10
        assert 1 < peak <= 3


class TestBuildCohortReport:

    def test_counts_only_critical_and_high_as_at_risk(self, make_engine):
        engine = make_engine({})
        analyses = [
            engine.analyze_snapshot("a", thriving_snapshot()),
            engine.analyze_snapshot("b", thriving_snapshot()),
            engine.analyze_snapshot("c", struggling_snapshot()),
        ]
        report = build_cohort_report(analyses)
        assert report.at_risk == 1
        assert report.needs_attention == []

    def test_zero_snapshot_analyses_count_as_critical(self, make_engine):
        engine = make_engine({})
        analyses = [engine.analyze_snapshot("z", MetricsSnapshot.empty("z"))]
        assert len(build_cohort_report(analyses).critical_cases) == 1
