"""Intervention strategy table and early-warning rule texts.

Strategies are looked up by ``(category, severity)`` through a two-level
table.  Learning, behavioral and social concerns have one strategy each,
shared by both severities.
"""

from __future__ import annotations

from errors import RiskConfigError
from models.risk import FactorSeverity, InterventionPriority, RiskCategory

# Days from analysis time until a strategy should be in place.
IMPLEMENTATION_OFFSET_DAYS: dict[InterventionPriority, int] = {
    InterventionPriority.URGENT: 0,
    InterventionPriority.HIGH: 1,
    InterventionPriority.MEDIUM: 3,
    InterventionPriority.LOW: 7,
}

_ENGAGEMENT_CRITICAL = {
    "priority": InterventionPriority.URGENT,
    "title": "Critical Engagement Issue",
    "actions": [
        {"type": "immediate", "action": "Contact parent/guardian immediately"},
        {"type": "immediate", "action": "Schedule one-on-one check-in"},
        {"type": "schedule", "action": "Create personalized motivation plan"},
        {"type": "monitor", "action": "Daily engagement tracking"},
    ],
}

_ENGAGEMENT_WARNING = {
    "priority": InterventionPriority.HIGH,
    "title": "Engagement Dropping",
    "actions": [
        {"type": "immediate", "action": "Send encouraging notification"},
        {"type": "schedule", "action": "Introduce gamification elements"},
        {"type": "adjust", "action": "Reduce session length, increase frequency"},
    ],
}

_PERFORMANCE_CRITICAL = {
    "priority": InterventionPriority.URGENT,
    "title": "Performance Crisis",
    "actions": [
        {"type": "immediate", "action": "Pause advancement, focus on review"},
        {"type": "immediate", "action": "Activate AI tutor for all questions"},
        {"type": "schedule", "action": "Create remediation plan"},
        {"type": "contact", "action": "Recommend external tutoring support"},
    ],
}

_PERFORMANCE_WARNING = {
    "priority": InterventionPriority.HIGH,
    "title": "Performance Decline Detected",
    "actions": [
        {"type": "adjust", "action": "Reduce difficulty temporarily"},
        {"type": "schedule", "action": "Extra practice in weak areas"},
        {"type": "enable", "action": "Unlock all hints and help features"},
    ],
}

_LEARNING_PACE = {
    "priority": InterventionPriority.MEDIUM,
    "title": "Learning Pace Issues",
    "actions": [
        {"type": "adjust", "action": "Modify content difficulty"},
        {"type": "schedule", "action": "Break topics into smaller chunks"},
        {"type": "recommend", "action": "Adjust study schedule"},
    ],
}

_BEHAVIORAL_CONCERN = {
    "priority": InterventionPriority.HIGH,
    "title": "Behavioral Patterns of Concern",
    "actions": [
        {"type": "immediate", "action": "Check for frustration/burnout"},
        {"type": "adjust", "action": "Implement more breaks"},
        {"type": "enable", "action": "Activate focus mode suggestions"},
        {"type": "recommend", "action": "Mental health resources if needed"},
    ],
}

_SOCIAL_ISOLATION = {
    "priority": InterventionPriority.MEDIUM,
    "title": "Limited Peer Interaction",
    "actions": [
        {"type": "recommend", "action": "Suggest joining study groups"},
        {"type": "schedule", "action": "Introduce peer challenges"},
        {"type": "enable", "action": "Unlock collaborative features"},
    ],
}

INTERVENTION_STRATEGIES: dict[RiskCategory, dict[FactorSeverity, dict]] = {
    RiskCategory.ENGAGEMENT: {
        FactorSeverity.CRITICAL: _ENGAGEMENT_CRITICAL,
        FactorSeverity.WARNING: _ENGAGEMENT_WARNING,
    },
    RiskCategory.PERFORMANCE: {
        FactorSeverity.CRITICAL: _PERFORMANCE_CRITICAL,
        FactorSeverity.WARNING: _PERFORMANCE_WARNING,
    },
    RiskCategory.LEARNING: {
        FactorSeverity.CRITICAL: _LEARNING_PACE,
        FactorSeverity.WARNING: _LEARNING_PACE,
    },
    RiskCategory.BEHAVIORAL: {
        FactorSeverity.CRITICAL: _BEHAVIORAL_CONCERN,
        FactorSeverity.WARNING: _BEHAVIORAL_CONCERN,
    },
    RiskCategory.SOCIAL: {
        FactorSeverity.CRITICAL: _SOCIAL_ISOLATION,
        FactorSeverity.WARNING: _SOCIAL_ISOLATION,
    },
}

# Early-warning texts keyed by rule name: (type, severity, message, recommendation).
EARLY_WARNING_TEXTS: dict[str, tuple[str, str, str, str]] = {
    "streak_broken": (
        "engagement",
        "high",
        "Streak broken - student may disengage",
        "Send encouragement notification today",
    ),
    "accuracy_decline": (
        "performance",
        "high",
        "Sharp decline in accuracy detected",
        "Reduce difficulty and increase support",
    ),
    "reviews_piling_up": (
        "retention",
        "medium",
        "Reviews piling up - retention at risk",
        "Schedule review catch-up sessions",
    ),
}


def lookup_strategy(category: RiskCategory, severity: FactorSeverity) -> dict | None:
    """Return the strategy template for a weak category, or None if unmapped."""
    return INTERVENTION_STRATEGIES.get(category, {}).get(severity)


def validate_strategies(table: dict[RiskCategory, dict[FactorSeverity, dict]]) -> None:
    for category, by_severity in table.items():
        for severity, strategy in by_severity.items():
            where = f"{category.value}-{severity.value}"
            if strategy.get("priority") not in IMPLEMENTATION_OFFSET_DAYS:
                raise RiskConfigError("intervention strategy", f"{where} has unknown priority")
            if not strategy.get("title") or not strategy.get("actions"):
                raise RiskConfigError("intervention strategy", f"{where} needs a title and actions")


validate_strategies(INTERVENTION_STRATEGIES)
