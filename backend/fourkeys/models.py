"""Value objects passed in and out of the four keys engine."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from fourkeys.errors import ConfigurationError
from fourkeys.performance_levels import describe_level

# Backlog returns "2024-10-31T12:11:56Z"; callers may also send date-only values,
# minute precision (datetime-local inputs) or a space separator
TIMESTAMP_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M%z",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
]


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a Backlog timestamp or an ISO date into an aware datetime.

    Naive values are assumed to be UTC. Returns None for empty, non-string
    or unrecognised input.
    """
    if not value or not isinstance(value, str):
        return None

    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    return None


def _id_set(value: Any) -> frozenset:
    """Coerce a scalar or collection of identifiers into a frozenset."""
    if value is None or value == "":
        return frozenset()
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(v for v in value if v is not None and v != "")
    return frozenset([value])


@dataclass(frozen=True)
class Project:
    id: int
    project_key: str
    name: str

    @classmethod
    def from_api(cls, data: dict) -> "Project":
        return cls(
            id=data["id"],
            project_key=data.get("projectKey", ""),
            name=data.get("name", ""),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "key": self.project_key, "name": self.name}


@dataclass(frozen=True)
class MetricsConfig:
    """Identifier sets and date window for one metrics calculation.

    ``since`` and ``until`` are kept as supplied (date-only or full ISO-8601)
    and echoed back in the report.
    """

    completion_status_ids: frozenset = frozenset()
    change_type_ids: frozenset = frozenset()
    change_category_ids: frozenset = frozenset()
    bug_type_ids: frozenset = frozenset()
    bug_category_ids: frozenset = frozenset()
    since: Optional[str] = None
    until: Optional[str] = None

    def __post_init__(self):
        for name in ("completion_status_ids", "change_type_ids",
                     "change_category_ids", "bug_type_ids", "bug_category_ids"):
            object.__setattr__(self, name, _id_set(getattr(self, name)))

        for name in ("since", "until"):
            value = getattr(self, name)
            if value and parse_timestamp(value) is None:
                raise ConfigurationError(
                    f"Invalid {name} date: {value!r} (expected YYYY-MM-DD or ISO-8601)"
                )

    @classmethod
    def from_dict(cls, data: dict) -> "MetricsConfig":
        """Build from the camelCase shape sent by the presentation layer."""
        return cls(
            completion_status_ids=data.get("completionStatusIds"),
            change_type_ids=data.get("changeTypeIds"),
            change_category_ids=data.get("changeCategoryIds"),
            bug_type_ids=data.get("bugTypeIds"),
            bug_category_ids=data.get("bugCategoryIds"),
            since=data.get("since") or None,
            until=data.get("until") or None,
        )


@dataclass(frozen=True)
class MetricResult:
    value: float
    unit: str
    performance_level: str
    description: str
    count: Optional[int] = None
    # metric specific extras such as periodDays, changeCount, bugCount
    details: dict = field(default_factory=dict)

    def to_dict(self, metric: Optional[str] = None) -> dict:
        result = {
            "value": self.value,
            "unit": self.unit,
            "performanceLevel": self.performance_level,
            "description": self.description,
        }
        if self.count is not None:
            result["count"] = self.count
        result.update(self.details)
        if metric:
            result["levelDescription"] = describe_level(metric, self.performance_level)
        return result


@dataclass(frozen=True)
class MetricsReport:
    deployment_frequency: MetricResult
    lead_time: MetricResult
    mean_time_to_recovery: MetricResult
    change_failure_rate: MetricResult
    calculated_at: datetime
    since: Optional[str]
    until: Optional[str]
    project: Project

    def to_dict(self) -> dict:
        return {
            "deploymentFrequency": self.deployment_frequency.to_dict("deploymentFrequency"),
            "leadTime": self.lead_time.to_dict("leadTime"),
            "meanTimeToRecovery": self.mean_time_to_recovery.to_dict("mttr"),
            "changeFailureRate": self.change_failure_rate.to_dict("changeFailureRate"),
            "calculatedAt": self.calculated_at.isoformat(),
            "period": {"since": self.since, "until": self.until},
            "project": self.project.to_dict(),
        }
