"""Data collaborators for the risk engine."""

from tools.data_tools import fetch_student_metrics

__all__ = ["fetch_student_metrics"]
