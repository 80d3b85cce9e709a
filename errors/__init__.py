"""Custom exception hierarchy for the risk analysis service."""

from errors.exceptions import DataFetchError, RiskConfigError, RiskEngineError

__all__ = ["DataFetchError", "RiskConfigError", "RiskEngineError"]
