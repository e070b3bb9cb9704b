"""Backlog credential pass-through shared by the API blueprints.

Credentials are never stored; each request carries them in headers:
    - X-Backlog-Space: space key (``<space>.backlog.com``)
    - X-Backlog-Api-Key: user's API key
    - X-Backlog-Base-Url: optional API root overriding the space URL
"""

import requests
from flask import request, jsonify

from fourkeys import BacklogApiService, UpstreamError


def get_backlog_credentials():
    """Extract Backlog credentials from request headers."""
    space_key = request.headers.get("X-Backlog-Space", "").strip()
    api_key = request.headers.get("X-Backlog-Api-Key")
    base_url = request.headers.get("X-Backlog-Base-Url") or None

    if not api_key or not (space_key or base_url):
        return None

    return space_key, api_key, base_url


def make_backlog_client():
    """Build a client from request headers, or None if headers are missing."""
    credentials = get_backlog_credentials()
    if not credentials:
        return None

    space_key, api_key, base_url = credentials
    return BacklogApiService(space_key, api_key, base_url=base_url)


def missing_credentials_response():
    return jsonify({"error": "Missing Backlog credentials in headers"}), 401


def upstream_error_response(error: UpstreamError):
    """Map an upstream failure onto a proxy response."""
    if isinstance(error.cause, requests.exceptions.Timeout):
        return jsonify({"error": "Connection to Backlog timed out"}), 504

    if error.status_code in (401, 403, 404):
        return jsonify({"error": str(error)}), error.status_code

    return jsonify({"error": str(error)}), 502
