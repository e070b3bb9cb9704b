"""DORA four keys metrics calculated from Backlog issue data."""

from fourkeys.backlog_client import BacklogApiService
from fourkeys.errors import (
    ConfigurationError,
    FourKeysError,
    MetricCalculationError,
    UpstreamError,
)
from fourkeys.four_keys_metrics import FourKeysMetricsService
from fourkeys.models import MetricResult, MetricsConfig, MetricsReport, Project

__all__ = [
    "BacklogApiService",
    "ConfigurationError",
    "FourKeysError",
    "FourKeysMetricsService",
    "MetricCalculationError",
    "MetricResult",
    "MetricsConfig",
    "MetricsReport",
    "Project",
    "UpstreamError",
]
