"""Project and taxonomy API endpoints.

These expose the identifier sets (statuses, issue types, categories) the
front-end offers when configuring a four keys calculation.
"""

from flask import Blueprint, jsonify

from app import is_project_allowed
from app.api.credentials import (
    make_backlog_client,
    missing_credentials_response,
    upstream_error_response,
)
from fourkeys import UpstreamError

bp = Blueprint("projects", __name__, url_prefix="/api/projects")


def _format_items(items):
    return [{"id": item["id"], "name": item.get("name")} for item in items]


@bp.route("", methods=["GET"])
def list_projects():
    """List projects visible to the API key, flagged with allow-list status."""
    client = make_backlog_client()
    if not client:
        return missing_credentials_response()

    try:
        projects = client.get_projects()
    except UpstreamError as e:
        return upstream_error_response(e)

    formatted_projects = [
        {
            "id": project["id"],
            "projectKey": project.get("projectKey"),
            "name": project.get("name"),
            "allowed": is_project_allowed(project.get("projectKey"))
        }
        for project in projects
    ]

    return jsonify({"data": formatted_projects})


@bp.route("/<project_key>", methods=["GET"])
def get_project(project_key):
    """Get a single project by key or ID."""
    client = make_backlog_client()
    if not client:
        return missing_credentials_response()

    try:
        project = client.get_project(project_key)
    except UpstreamError as e:
        return upstream_error_response(e)

    return jsonify({
        "data": {
            "id": project["id"],
            "projectKey": project.get("projectKey"),
            "name": project.get("name")
        }
    })


@bp.route("/<project_key>/statuses", methods=["GET"])
def get_statuses(project_key):
    client = make_backlog_client()
    if not client:
        return missing_credentials_response()

    try:
        return jsonify({"data": _format_items(client.get_statuses(project_key))})
    except UpstreamError as e:
        return upstream_error_response(e)


@bp.route("/<project_key>/issue-types", methods=["GET"])
def get_issue_types(project_key):
    client = make_backlog_client()
    if not client:
        return missing_credentials_response()

    try:
        return jsonify({"data": _format_items(client.get_issue_types(project_key))})
    except UpstreamError as e:
        return upstream_error_response(e)


@bp.route("/<project_key>/categories", methods=["GET"])
def get_categories(project_key):
    client = make_backlog_client()
    if not client:
        return missing_credentials_response()

    try:
        return jsonify({"data": _format_items(client.get_categories(project_key))})
    except UpstreamError as e:
        return upstream_error_response(e)
