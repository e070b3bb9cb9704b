"""Authentication API endpoints."""

from flask import Blueprint, request, jsonify

from app.api.credentials import upstream_error_response
from fourkeys import BacklogApiService, ConfigurationError, UpstreamError

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.route("/validate", methods=["POST"])
def validate_api_key():
    """Validate a Backlog API key by fetching the current user.

    Expects JSON body with:
        - spaceKey: Backlog space key
        - apiKey: User's Backlog API key
        - baseUrl: Optional API root (e.g. for backlog.jp spaces)

    Returns user and space info on success.
    """
    data = request.get_json(silent=True)

    if not data:
        return jsonify({"error": "Missing request body"}), 400

    space_key = (data.get("spaceKey") or "").strip()
    api_key = data.get("apiKey")
    base_url = data.get("baseUrl") or None

    try:
        client = BacklogApiService(space_key, api_key, base_url=base_url)
    except ConfigurationError as e:
        return jsonify({"error": f"Missing required fields: {e}"}), 400

    try:
        user_info = client.get_user_info()
        space_info = client.get_space_info()
    except UpstreamError as e:
        if e.status_code == 401:
            return jsonify({"error": "Invalid API key"}), 401
        return upstream_error_response(e)

    return jsonify({
        "data": {
            "valid": True,
            "user": {
                "id": user_info.get("id"),
                "userId": user_info.get("userId"),
                "name": user_info.get("name"),
                "mailAddress": user_info.get("mailAddress")
            },
            "space": {
                "spaceKey": space_info.get("spaceKey"),
                "name": space_info.get("name")
            }
        }
    })
