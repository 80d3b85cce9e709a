"""Risk indicator table — category weights and per-factor bounds.

Each factor is scored against ``threshold`` (acceptable) and ``critical``
(maximum risk).  ``direction`` says which way is good: ``"higher"`` for
metrics like accuracy, ``"lower"`` for rates like failures or interruptions.

The table is validated once at import; a broken table raises
:class:`errors.RiskConfigError` before any analysis can run.
"""

from __future__ import annotations

import math

from errors import RiskConfigError
from models.risk import RiskCategory

WEIGHT_TOLERANCE = 1e-6

RISK_INDICATORS: dict[RiskCategory, dict] = {
    RiskCategory.ENGAGEMENT: {
        "weight": 0.25,
        "factors": {
            "streakLength": {"threshold": 3, "critical": 0, "direction": "higher"},
            "sessionFrequency": {"threshold": 0.5, "critical": 0.2, "direction": "higher"},  # sessions/day
            "sessionCompletion": {"threshold": 0.7, "critical": 0.4, "direction": "higher"},
            "lastActivityDays": {"threshold": 3, "critical": 7, "direction": "lower"},
        },
    },
    RiskCategory.PERFORMANCE: {
        "weight": 0.30,
        "factors": {
            "averageAccuracy": {"threshold": 70, "critical": 50, "direction": "higher"},
            "recentAccuracyTrend": {"threshold": -5, "critical": -15, "direction": "higher"},  # % change
            "failureRate": {"threshold": 0.3, "critical": 0.5, "direction": "lower"},
            "difficultyProgression": {"threshold": 0, "critical": -2, "direction": "higher"},
        },
    },
    RiskCategory.LEARNING: {
        "weight": 0.20,
        "factors": {
            "topicCompletionRate": {"threshold": 0.6, "critical": 0.3, "direction": "higher"},
            "reviewCompletion": {"threshold": 0.8, "critical": 0.5, "direction": "higher"},
            "helpRequestFrequency": {"threshold": 0.3, "critical": 0.6, "direction": "lower"},
            "timePerQuestion": {"threshold": 2, "critical": 4, "direction": "lower"},  # x expected
        },
    },
    RiskCategory.BEHAVIORAL: {
        "weight": 0.15,
        "factors": {
            "interruptionRate": {"threshold": 0.2, "critical": 0.5, "direction": "lower"},
            "habitCompletionRate": {"threshold": 0.7, "critical": 0.4, "direction": "higher"},
            "focusScore": {"threshold": 70, "critical": 50, "direction": "higher"},
            "frustrationIndicators": {"threshold": 2, "critical": 5, "direction": "lower"},  # per session
        },
    },
    RiskCategory.SOCIAL: {
        "weight": 0.10,
        "factors": {
            "peerInteraction": {"threshold": 0.5, "critical": 0.1, "direction": "higher"},
            "collaborationScore": {"threshold": 60, "critical": 30, "direction": "higher"},
            "helpGiven": {"threshold": 0.3, "critical": 0, "direction": "higher"},
        },
    },
}

# Human-readable text per category: (critical, warning).
FACTOR_DESCRIPTIONS: dict[RiskCategory, tuple[str, str]] = {
    RiskCategory.ENGAGEMENT: (
        "Student shows critically low engagement with the platform",
        "Student engagement is below optimal levels",
    ),
    RiskCategory.PERFORMANCE: (
        "Academic performance is critically low and declining",
        "Performance indicators show concerning trends",
    ),
    RiskCategory.LEARNING: (
        "Learning pace and comprehension are significantly behind",
        "Learning metrics indicate difficulty keeping up",
    ),
    RiskCategory.BEHAVIORAL: (
        "Behavioral patterns suggest severe frustration or burnout",
        "Behavioral indicators show signs of struggle",
    ),
    RiskCategory.SOCIAL: (
        "Student is isolated with no peer interaction",
        "Limited social engagement may impact motivation",
    ),
}


def validate_risk_indicators(table: dict[RiskCategory, dict]) -> None:
    """Check table invariants; raise :class:`RiskConfigError` on the first violation.

    - every category is present, with at least one factor
    - weights sum to 1.0 (within ``WEIGHT_TOLERANCE``)
    - ``threshold != critical`` and ``critical`` lies on the bad side of
      ``threshold`` for the factor's direction
    """
    missing = set(RiskCategory) - set(table)
    if missing:
        raise RiskConfigError("risk indicator", f"missing categories {sorted(c.value for c in missing)}")

    total = sum(cfg["weight"] for cfg in table.values())
    if not math.isclose(total, 1.0, abs_tol=WEIGHT_TOLERANCE):
        raise RiskConfigError("risk indicator", f"category weights sum to {total}, expected 1.0")

    for category, cfg in table.items():
        if cfg["weight"] < 0:
            raise RiskConfigError("risk indicator", f"{category.value} has negative weight")
        factors = cfg.get("factors") or {}
        if not factors:
            raise RiskConfigError("risk indicator", f"{category.value} has no factors")
        for name, bounds in factors.items():
            threshold, critical = bounds["threshold"], bounds["critical"]
            direction = bounds.get("direction")
            where = f"{category.value}.{name}"
            if direction not in ("higher", "lower"):
                raise RiskConfigError("risk indicator", f"{where} has unknown direction {direction!r}")
            if threshold == critical:
                raise RiskConfigError("risk indicator", f"{where} has threshold == critical ({threshold})")
            if direction == "higher" and critical > threshold:
                raise RiskConfigError("risk indicator", f"{where}: critical must be below threshold")
            if direction == "lower" and critical < threshold:
                raise RiskConfigError("risk indicator", f"{where}: critical must be above threshold")


validate_risk_indicators(RISK_INDICATORS)
