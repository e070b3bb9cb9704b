"""Exceptions raised by the four keys engine."""

from typing import Optional


class FourKeysError(Exception):
    """Base class for all four keys errors."""


class UpstreamError(FourKeysError):
    """The issue tracker could not be reached or returned a bad response.

    Covers network failures, non-2xx responses and malformed payloads.
    The original exception (if any) is kept on ``cause``.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code


class MetricCalculationError(FourKeysError):
    """A single metric could not be calculated."""

    def __init__(self, metric: str, cause: BaseException):
        super().__init__(f"Failed to calculate {metric}: {cause}")
        self.metric = metric
        self.cause = cause


class ConfigurationError(FourKeysError):
    """Caller supplied credentials or settings that cannot be used.

    Empty identifier sets are not configuration errors; those metrics
    report a "not configured" zero result instead.
    """
