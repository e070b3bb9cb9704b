"""Backlog API v2 client.

Wraps the read-only endpoints the metrics need and the exhaustive, paced
pagination over ``/issues``. The HTTP transport is a ``requests.Session``
that callers may inject (tests, proxies, custom adapters).
"""

import logging
import time
from typing import Callable, Optional

import requests

from fourkeys.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

BACKLOG_URL_TEMPLATE = "https://{space_key}.backlog.com/api/v2"

PAGE_SIZE = 100
PAGE_DELAY_SECONDS = 0.1
REQUEST_TIMEOUT = 30

IDENTIFIER_FIELDS = ("projectId", "statusId", "issueTypeId", "categoryId")
DATE_FIELDS = ("createdSince", "createdUntil", "updatedSince", "updatedUntil")
PAGING_FIELDS = ("count", "offset")


def _is_blank(value) -> bool:
    return value is None or value == ""


def _as_id_list(value) -> list:
    """Coerce a scalar or collection of identifiers into a list."""
    if _is_blank(value):
        return []
    if isinstance(value, (set, frozenset)):
        return sorted((v for v in value if not _is_blank(v)), key=str)
    if isinstance(value, (list, tuple)):
        return [v for v in value if not _is_blank(v)]
    return [value]


def build_issue_filters(options: dict) -> dict:
    """Normalize issue filter options into Backlog query parameters.

    Identifier fields are always emitted as ``name[]`` lists, whether the
    caller passed a scalar, a collection, or an already normalized
    ``name[]`` key. Blank values are dropped. Date bounds and paging
    cursor pass through unchanged.

    Example:
        >>> build_issue_filters({"statusId": 5, "updatedSince": "2024-01-01"})
        {'statusId[]': [5], 'updatedSince': '2024-01-01'}
    """
    filters = {}

    for name in IDENTIFIER_FIELDS:
        value = options.get(name)
        if _is_blank(value):
            value = options.get(f"{name}[]")
        ids = _as_id_list(value)
        if ids:
            filters[f"{name}[]"] = ids

    for name in DATE_FIELDS + PAGING_FIELDS:
        value = options.get(name)
        if not _is_blank(value):
            filters[name] = value

    return filters


class BacklogApiService:
    """Client for a single Backlog space."""

    def __init__(self, space_key: str, api_key: str,
                 base_url: Optional[str] = None,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        if not api_key:
            raise ConfigurationError("Backlog API key is required")
        if not space_key and not base_url:
            raise ConfigurationError("Backlog space key or base URL is required")

        self.space_key = space_key
        self.api_key = api_key
        self.base_url = (
            base_url or BACKLOG_URL_TEMPLATE.format(space_key=space_key)
        ).rstrip("/")
        self.session = session or requests.Session()
        self._sleep = sleep

    def _request(self, endpoint: str, params: Optional[dict] = None):
        """Make an authenticated GET request and return the decoded JSON."""
        query = {"apiKey": self.api_key}
        if params:
            query.update(params)

        logger.debug(f"GET {endpoint} params={params or {}}")

        try:
            response = self.session.get(
                f"{self.base_url}{endpoint}",
                params=query,
                headers={"Accept": "application/json"},
                timeout=REQUEST_TIMEOUT
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise UpstreamError(
                f"Backlog API error on {endpoint}: HTTP {status_code}",
                cause=e,
                status_code=status_code
            ) from e
        except requests.exceptions.RequestException as e:
            raise UpstreamError(
                f"Failed to connect to Backlog ({endpoint}): {e}", cause=e
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Malformed response from Backlog ({endpoint})", cause=e
            ) from e

    def get_user_info(self) -> dict:
        return self._request("/users/myself")

    def get_space_info(self) -> dict:
        return self._request("/space")

    def get_projects(self) -> list:
        return self._request("/projects")

    def get_project(self, project_id_or_key) -> dict:
        return self._request(f"/projects/{project_id_or_key}")

    def get_statuses(self, project_id) -> list:
        return self._request(f"/projects/{project_id}/statuses")

    def get_issue_types(self, project_id) -> list:
        return self._request(f"/projects/{project_id}/issueTypes")

    def get_categories(self, project_id) -> list:
        return self._request(f"/projects/{project_id}/categories")

    def get_issues(self, params: Optional[dict] = None) -> list:
        """Fetch a single page of issues."""
        issues = self._request("/issues", params)
        if not isinstance(issues, list):
            raise UpstreamError(
                f"Malformed response from Backlog (/issues): expected a list, "
                f"got {type(issues).__name__}"
            )
        if not all(isinstance(issue, dict) for issue in issues):
            raise UpstreamError(
                "Malformed response from Backlog (/issues): expected a list of issue objects"
            )
        return issues

    def get_issues_count(self, params: Optional[dict] = None) -> int:
        data = self._request("/issues/count", params)
        if not isinstance(data, dict) or "count" not in data:
            raise UpstreamError("Malformed response from Backlog (/issues/count)")
        return data["count"]

    def get_all_issues(self, project_id, filters: Optional[dict] = None) -> list:
        """Fetch every issue matching the filters, page by page.

        Pages of PAGE_SIZE are requested sequentially with a fixed
        PAGE_DELAY_SECONDS pause between them. An empty or short page ends
        the sweep. Any failed page aborts the whole call; nothing partial
        is returned.
        """
        all_issues = []
        offset = 0

        while True:
            params = build_issue_filters({
                "projectId": project_id,
                **(filters or {}),
                "count": PAGE_SIZE,
                "offset": offset
            })

            issues = self.get_issues(params)

            if not issues:
                break

            all_issues.extend(issues)
            offset += PAGE_SIZE

            if len(issues) < PAGE_SIZE:
                break

            self._sleep(PAGE_DELAY_SECONDS)

        logger.info(f"Fetched {len(all_issues)} issues for project {project_id}")
        return all_issues
