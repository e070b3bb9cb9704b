"""DORA four keys calculation service."""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from fourkeys.backlog_client import BacklogApiService
from fourkeys.errors import MetricCalculationError, UpstreamError
from fourkeys.models import (
    MetricResult,
    MetricsConfig,
    MetricsReport,
    Project,
    parse_timestamp,
)
from fourkeys.performance_levels import (
    ELITE,
    LOW,
    classify_change_failure_rate,
    classify_deployment_frequency,
    classify_lead_time,
    classify_mttr,
)

logger = logging.getLogger(__name__)

# Status names containing any of these count as resolved (Japanese and English)
RESOLVED_STATUS_MARKERS = ("完了", "解決", "Resolved", "Done")

MS_PER_DAY = 24 * 60 * 60 * 1000
SECONDS_PER_DAY = 24 * 60 * 60
SECONDS_PER_HOUR = 60 * 60

DEPLOYMENT_UNIT = "deployments per day"
LEAD_TIME_UNIT = "days"
MTTR_UNIT = "hours"
FAILURE_RATE_UNIT = "%"


def round_half_up(value: float, digits: int = 2) -> float:
    """Round halves up, as JavaScript Math.round does (1.125 -> 1.13)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def to_api_date(value: Optional[str]) -> Optional[str]:
    """Reduce a date or ISO timestamp to the YYYY-MM-DD form Backlog expects."""
    parsed = parse_timestamp(value)
    return parsed.date().isoformat() if parsed else None


def status_name(issue: dict) -> str:
    status = issue.get("status")
    if isinstance(status, dict):
        return status.get("name") or ""
    return status or ""


def is_resolved_status(issue: dict) -> bool:
    name = status_name(issue)
    return any(marker in name for marker in RESOLVED_STATUS_MARKERS)


def _has_any(*id_sets) -> bool:
    return any(ids for ids in id_sets)


class FourKeysMetricsService:
    """Calculates the four keys for one Backlog project.

    The service keeps no state between calls; every calculation takes its
    identifier sets and date window as arguments.
    """

    def __init__(self, backlog_api: BacklogApiService, project: Union[Project, dict]):
        self.backlog_api = backlog_api
        self.project = project if isinstance(project, Project) else Project.from_api(project)

    def _date_window(self, field: str, since: Optional[str], until: Optional[str]) -> dict:
        """Build ``<field>Since``/``<field>Until`` filters (field is created or updated)."""
        return {
            f"{field}Since": to_api_date(since),
            f"{field}Until": to_api_date(until),
        }

    def _identifier_filters(self, type_ids, category_ids) -> dict:
        filters = {}
        if type_ids:
            filters["issueTypeId"] = type_ids
        if category_ids:
            filters["categoryId"] = category_ids
        return filters

    def _fetch(self, metric: str, filters: dict) -> list:
        try:
            return self.backlog_api.get_all_issues(self.project.id, filters)
        except UpstreamError as e:
            raise MetricCalculationError(metric, e) from e

    def _elapsed_values(self, issues: list, seconds_per_unit: int) -> list:
        """Elapsed time from created to updated, in the given unit."""
        values = []
        for issue in issues:
            created = parse_timestamp(issue.get("created"))
            updated = parse_timestamp(issue.get("updated"))
            values.append((updated - created).total_seconds() / seconds_per_unit)
        return values

    def _with_timestamps(self, issues: list) -> list:
        return [
            issue for issue in issues
            if parse_timestamp(issue.get("created")) and parse_timestamp(issue.get("updated"))
        ]

    def calculate_period_in_days(self, since: Optional[str], until: Optional[str]) -> int:
        """Whole days from ``since`` 00:00:00 through ``until`` 23:59:59.

        A same-day window counts as one day. Missing bounds or an inverted
        window yield 0.
        """
        start = parse_timestamp(since) if since else None
        end = parse_timestamp(until) if until else None
        if start is None or end is None:
            return 0

        start = start.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
        end = end.replace(hour=23, minute=59, second=59, microsecond=0, tzinfo=None)
        span_ms = (end - start).total_seconds() * 1000

        if span_ms <= 0:
            return 0
        return math.ceil(span_ms / MS_PER_DAY)

    def calculate_deployment_frequency(self, completion_status_ids, since: Optional[str],
                                       until: Optional[str]) -> MetricResult:
        """Completed issues per day within the update window."""
        if not completion_status_ids:
            return MetricResult(
                value=0,
                unit=DEPLOYMENT_UNIT,
                performance_level=LOW,
                description="No completion statuses configured"
            )

        issues = self._fetch("deployment frequency", {
            "statusId": completion_status_ids,
            **self._date_window("updated", since, until)
        })

        deployment_count = len(issues)
        period_days = self.calculate_period_in_days(since, until)
        deployments_per_day = deployment_count / period_days if period_days > 0 else 0

        return MetricResult(
            value=deployments_per_day,
            unit=DEPLOYMENT_UNIT,
            performance_level=classify_deployment_frequency(deployments_per_day),
            description=f"{deployment_count} deployments in {period_days} days",
            count=deployment_count,
            details={"periodDays": period_days}
        )

    def calculate_lead_time(self, change_type_ids, change_category_ids, completion_status_ids,
                            since: Optional[str], until: Optional[str]) -> MetricResult:
        """Mean days from creation to last update for completed change issues."""
        if not _has_any(change_type_ids, change_category_ids):
            return MetricResult(
                value=0,
                unit=LEAD_TIME_UNIT,
                performance_level=LOW,
                description="No change types or categories configured"
            )

        filters = {
            **self._date_window("updated", since, until),
            **self._identifier_filters(change_type_ids, change_category_ids)
        }
        if completion_status_ids:
            filters["statusId"] = completion_status_ids

        issues = self._fetch("lead time", filters)
        if not issues:
            return self._empty(LEAD_TIME_UNIT, "No completed change issues found")

        timed = self._with_timestamps(issues)
        if not timed:
            return self._empty(LEAD_TIME_UNIT, "No change issues with created and updated dates")

        lead_times = [days for days in self._elapsed_values(timed, SECONDS_PER_DAY) if days >= 0]
        if not lead_times:
            return self._empty(LEAD_TIME_UNIT, "No valid lead times calculated")

        average = sum(lead_times) / len(lead_times)

        return MetricResult(
            value=round_half_up(average),
            unit=LEAD_TIME_UNIT,
            performance_level=classify_lead_time(average),
            description=f"Average of {len(lead_times)} completed changes",
            count=len(lead_times)
        )

    def calculate_mttr(self, bug_type_ids, bug_category_ids, since: Optional[str],
                       until: Optional[str],
                       is_resolved: Callable[[dict], bool] = is_resolved_status) -> MetricResult:
        """Mean hours from creation to last update for resolved bugs.

        ``is_resolved`` decides which fetched bugs count as recovered; the
        default matches status names against RESOLVED_STATUS_MARKERS.
        """
        if not _has_any(bug_type_ids, bug_category_ids):
            return MetricResult(
                value=0,
                unit=MTTR_UNIT,
                performance_level=LOW,
                description="No bug types or categories configured"
            )

        issues = self._fetch("MTTR", {
            **self._date_window("updated", since, until),
            **self._identifier_filters(bug_type_ids, bug_category_ids)
        })
        if not issues:
            return self._empty(MTTR_UNIT, "No bugs found in the period")

        resolved_bugs = [issue for issue in issues if is_resolved(issue)]
        if not resolved_bugs:
            return self._empty(MTTR_UNIT, "No resolved bugs found")

        timed = self._with_timestamps(resolved_bugs)
        if not timed:
            return self._empty(MTTR_UNIT, "No resolved bugs with created and updated dates")

        recovery_times = [
            hours for hours in self._elapsed_values(timed, SECONDS_PER_HOUR) if hours >= 0
        ]
        if not recovery_times:
            return self._empty(MTTR_UNIT, "No valid recovery times calculated")

        average = sum(recovery_times) / len(recovery_times)

        return MetricResult(
            value=round_half_up(average),
            unit=MTTR_UNIT,
            performance_level=classify_mttr(average),
            description=f"Average of {len(recovery_times)} resolved bugs",
            count=len(recovery_times)
        )

    def calculate_change_failure_rate(self, change_type_ids, change_category_ids,
                                      bug_type_ids, bug_category_ids,
                                      since: Optional[str], until: Optional[str]) -> MetricResult:
        """Bugs created per change created in the window, as a percentage."""
        if not _has_any(change_type_ids, change_category_ids):
            return MetricResult(
                value=0,
                unit=FAILURE_RATE_UNIT,
                performance_level=ELITE,
                description="No change types or categories configured"
            )
        if not _has_any(bug_type_ids, bug_category_ids):
            return MetricResult(
                value=0,
                unit=FAILURE_RATE_UNIT,
                performance_level=ELITE,
                description="No bug types or categories configured"
            )

        # Failures are attributed by creation date, not last update
        window = self._date_window("created", since, until)
        change_filters = {**window, **self._identifier_filters(change_type_ids, change_category_ids)}
        bug_filters = {**window, **self._identifier_filters(bug_type_ids, bug_category_ids)}

        with ThreadPoolExecutor(max_workers=2) as executor:
            changes_future = executor.submit(self._fetch, "change failure rate", change_filters)
            bugs_future = executor.submit(self._fetch, "change failure rate", bug_filters)
            changes = changes_future.result()
            bugs = bugs_future.result()

        change_count = len(changes)
        bug_count = len(bugs)
        counts = {"changeCount": change_count, "bugCount": bug_count}

        if change_count == 0:
            return MetricResult(
                value=0,
                unit=FAILURE_RATE_UNIT,
                performance_level=ELITE,
                description="No changes found in the period",
                details=counts
            )

        failure_rate = bug_count / change_count * 100

        return MetricResult(
            value=round_half_up(failure_rate),
            unit=FAILURE_RATE_UNIT,
            performance_level=classify_change_failure_rate(failure_rate),
            description=f"{bug_count} bugs out of {change_count} changes",
            details=counts
        )

    def _empty(self, unit: str, description: str) -> MetricResult:
        return MetricResult(value=0, unit=unit, performance_level=LOW, description=description)

    def calculate_all_metrics(self, config: Union[MetricsConfig, dict]) -> MetricsReport:
        """Run the four calculations in parallel and assemble the report.

        Any failing metric fails the whole report.
        """
        if not isinstance(config, MetricsConfig):
            config = MetricsConfig.from_dict(config)

        since, until = config.since, config.until
        calculations = {
            "deployment_frequency": (
                self.calculate_deployment_frequency,
                (config.completion_status_ids, since, until)
            ),
            "lead_time": (
                self.calculate_lead_time,
                (config.change_type_ids, config.change_category_ids,
                 config.completion_status_ids, since, until)
            ),
            "mean_time_to_recovery": (
                self.calculate_mttr,
                (config.bug_type_ids, config.bug_category_ids, since, until)
            ),
            "change_failure_rate": (
                self.calculate_change_failure_rate,
                (config.change_type_ids, config.change_category_ids,
                 config.bug_type_ids, config.bug_category_ids, since, until)
            ),
        }

        logger.info(
            f"Calculating four keys for {self.project.project_key} ({since} - {until})"
        )

        results = {}
        with ThreadPoolExecutor(max_workers=len(calculations)) as executor:
            futures = {
                executor.submit(calculate, *args): name
                for name, (calculate, args) in calculations.items()
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        return MetricsReport(
            calculated_at=datetime.now(timezone.utc),
            since=since,
            until=until,
            project=self.project,
            **results
        )
