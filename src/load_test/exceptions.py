"""Custom exceptions for the load testing system."""
from typing import Iterable, Optional


class LoadTestError(Exception):
    """Base exception for load test failures."""
    pass


class UnknownPatternError(LoadTestError):
    """Exception raised when a query pattern name is not registered."""

    def __init__(self, pattern: str, available: Optional[Iterable[str]] = None):
        self.pattern = pattern
        self.available = sorted(available or [])
        message = f"Unknown query pattern: {pattern!r}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class MissingEndpointConfigError(LoadTestError):
    """Exception raised when the query endpoint is not configured."""
    pass


class CallFailure(LoadTestError):
    """Exception raised when a single query invocation fails."""
    pass
