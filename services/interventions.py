"""Intervention strategy selection for weak risk categories."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from config.interventions import IMPLEMENTATION_OFFSET_DAYS, lookup_strategy
from models.risk import (
    PRIORITY_RANK,
    InterventionAction,
    InterventionPriority,
    InterventionStrategy,
    RiskFactor,
)


def implementation_date(priority: InterventionPriority, now: datetime) -> datetime:
    """Deadline for putting a strategy in place, counted from ``now``."""
    return now + timedelta(days=IMPLEMENTATION_OFFSET_DAYS.get(priority, 7))


def generate_interventions(
    risk_factors: list[RiskFactor],
    now: datetime | None = None,
) -> list[InterventionStrategy]:
    """Map each risk factor to its strategy, most urgent first.

    Factors with no matching strategy are skipped.  Sorting is stable, so
    strategies of equal priority keep the order of ``risk_factors``.
    """
    now = now or datetime.now(timezone.utc)
    strategies: list[InterventionStrategy] = []

    for factor in risk_factors:
        template = lookup_strategy(factor.category, factor.severity)
        if template is None:
            continue
        priority = template["priority"]
        strategies.append(InterventionStrategy(
            priority=priority,
            title=template["title"],
            actions=[InterventionAction(**a) for a in template["actions"]],
            triggered_by_category=factor.category,
            score=factor.score,
            implement_by_date=implementation_date(priority, now),
        ))

    return sorted(strategies, key=lambda s: PRIORITY_RANK[s.priority])
