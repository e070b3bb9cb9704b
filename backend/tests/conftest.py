"""Shared fixtures for four keys tests."""

import os
import sys
from unittest.mock import Mock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fourkeys import BacklogApiService, Project


def make_issue(issue_id, created="2024-01-01T00:00:00Z", updated="2024-01-02T00:00:00Z",
               status="完了", issue_type_id=1, category_ids=None):
    """Build a Backlog issue record."""
    return {
        "id": issue_id,
        "issueKey": f"PROJ-{issue_id}",
        "created": created,
        "updated": updated,
        "status": {"id": 4, "name": status},
        "issueType": {"id": issue_type_id, "name": "Task"},
        "category": [{"id": c, "name": f"Category {c}"} for c in (category_ids or [])]
    }


def make_response(payload):
    """Mock requests.Response returning the payload from json()."""
    response = Mock(status_code=200)
    response.json.return_value = payload
    return response


@pytest.fixture
def backlog_credentials():
    """Backlog credentials for testing."""
    return {
        "space_key": "example",
        "api_key": "test-api-key-123"
    }


@pytest.fixture
def credential_headers():
    return {
        "X-Backlog-Space": "example",
        "X-Backlog-Api-Key": "test-api-key-123"
    }


@pytest.fixture
def mock_session():
    """Mock requests.Session used as the HTTP transport."""
    return Mock()


@pytest.fixture
def mock_sleep():
    return Mock()


@pytest.fixture
def backlog_client(backlog_credentials, mock_session, mock_sleep):
    return BacklogApiService(
        session=mock_session, sleep=mock_sleep, **backlog_credentials
    )


@pytest.fixture
def sample_project():
    return Project(id=12345, project_key="PROJ", name="Sample Project")


@pytest.fixture
def mock_backlog_api():
    """Mock BacklogApiService for metric calculations."""
    return Mock(spec=BacklogApiService)


@pytest.fixture
def app(tmp_path):
    """Create Flask test app with an empty config."""
    from app import create_app
    app = create_app(config_path=str(tmp_path / "missing.json"))
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()


@pytest.fixture
def issue_factory():
    return make_issue


@pytest.fixture
def response_factory():
    return make_response
