"""Analysis confidence from sample-size proxies."""

from __future__ import annotations

from models.metrics import MetricsSnapshot

BASELINE_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.95


def estimate_confidence(snapshot: MetricsSnapshot) -> float:
    """More sessions, attempts and a longer window mean more confidence, never certainty."""
    confidence = BASELINE_CONFIDENCE

    if snapshot.total_sessions > 50:
        confidence += 0.2
    elif snapshot.total_sessions > 20:
        confidence += 0.1

    if snapshot.total_attempts > 200:
        confidence += 0.15
    elif snapshot.total_attempts > 100:
        confidence += 0.1

    if snapshot.time_window_days >= 30:
        confidence += 0.1

    return min(MAX_CONFIDENCE, confidence)
