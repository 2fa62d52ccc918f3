"""Analytics exception hierarchy."""

from typing import Any


class AnalyticsError(Exception):
    """Base exception for analytics errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class AnalyticsValidationError(AnalyticsError):
    """Raised when the requested period or granularity is malformed."""

    pass


class AnalyticsRepositoryError(AnalyticsError):
    """Raised when an analytics query fails."""

    pass
