"""Risk analysis API — per-student analysis, stored profiles and cohort reports.

Endpoints:
- ``POST /api/risk/students/{student_id}/analyze`` — fetch metrics and analyse
- ``GET  /api/risk/students/{student_id}/profile`` — latest stored analysis
- ``POST /api/risk/cohort``                         — analyse a group of students

All responses are camelCase JSON.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from models.risk import (
    AnalyzeStudentRequest,
    CohortReport,
    CohortRequest,
    StudentRiskAnalysis,
)
from services.risk_engine import RiskAnalysisEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/risk", tags=["risk"])


def get_engine(request: Request) -> RiskAnalysisEngine:
    """The engine is created in the app lifespan and held on ``app.state``."""
    engine = getattr(request.app.state, "risk_engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Risk engine not initialised")
    return engine


@router.post("/students/{student_id}/analyze", response_model=StudentRiskAnalysis)
async def analyze_student(
    student_id: str,
    req: AnalyzeStudentRequest | None = None,
    engine: RiskAnalysisEngine = Depends(get_engine),
):
    req = req or AnalyzeStudentRequest()
    return await engine.analyze_student(
        student_id,
        grade_level=req.grade_level,
        time_window_days=req.time_window_days,
    )


@router.get("/students/{student_id}/profile", response_model=StudentRiskAnalysis)
async def get_risk_profile(
    student_id: str,
    engine: RiskAnalysisEngine = Depends(get_engine),
):
    profile = engine.get_risk_profile(student_id)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"No risk profile for student '{student_id}'")
    return profile


@router.post("/cohort", response_model=CohortReport)
async def monitor_cohort(
    req: CohortRequest,
    request: Request,
    engine: RiskAnalysisEngine = Depends(get_engine),
):
    logger.info(
        "[%s] Cohort analysis requested for %d students",
        getattr(request.state, "request_id", "-"), len(req.student_ids),
    )
    return await engine.monitor_cohort(
        req.student_ids,
        grade_level=req.grade_level,
        time_window_days=req.time_window_days,
    )
