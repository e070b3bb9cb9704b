"""Four keys metrics API endpoints."""

from flask import Blueprint, current_app, request, jsonify

from app import is_project_allowed
from app.api.credentials import (
    make_backlog_client,
    missing_credentials_response,
    upstream_error_response,
)
from fourkeys import (
    ConfigurationError,
    FourKeysMetricsService,
    MetricCalculationError,
    MetricsConfig,
    Project,
    UpstreamError,
)

bp = Blueprint("metrics", __name__, url_prefix="/api/metrics")


@bp.route("/<project_key>/four-keys", methods=["POST"])
def calculate_four_keys(project_key):
    """Calculate all four keys for a project.

    Expects JSON body with:
        - since / until: YYYY-MM-DD or ISO-8601 timestamps
        - completionStatusIds: status IDs that mean "deployed"
        - changeTypeIds / changeCategoryIds: what counts as a change
        - bugTypeIds / bugCategoryIds: what counts as a failure

    Returns the metrics report.
    """
    client = make_backlog_client()
    if not client:
        return missing_credentials_response()

    if not is_project_allowed(project_key):
        return jsonify({"error": f"Project {project_key} is not enabled"}), 403

    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    try:
        config = MetricsConfig.from_dict(data)
    except ConfigurationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        project = Project.from_api(client.get_project(project_key))
        service = FourKeysMetricsService(client, project)
        report = service.calculate_all_metrics(config)
    except MetricCalculationError as e:
        current_app.logger.warning(f"Metrics calculation failed for {project_key}: {e}")
        return jsonify({"error": str(e)}), 502
    except UpstreamError as e:
        return upstream_error_response(e)

    return jsonify({"data": report.to_dict()})
