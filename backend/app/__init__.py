"""Flask application factory."""

import json
import os
from flask import Flask, current_app
from flask_cors import CORS

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(__file__), "..", "config", "fourkeys-config.json"
)
DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def load_app_config(app, config_path=None):
    """Load project allow-list and CORS origins from the JSON config file."""
    config_path = config_path or os.environ.get("FOURKEYS_CONFIG", DEFAULT_CONFIG_PATH)
    config = {}

    if os.path.exists(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
            app.logger.info(f"Loaded configuration from {config_path}")
        except (json.JSONDecodeError, IOError) as e:
            app.logger.warning(f"Failed to load config {config_path}: {e}")
            config = {}
    else:
        app.logger.info("No fourkeys-config.json found, using defaults")

    app.config["ALLOWED_PROJECT_KEYS"] = set(
        str(key) for key in config.get("allowedProjectKeys", [])
    )
    app.config["CORS_ORIGINS"] = config.get("corsOrigins") or DEFAULT_CORS_ORIGINS


def is_project_allowed(project_key):
    """Check a project against the allow-list (an empty list allows all)."""
    allowed = current_app.config.get("ALLOWED_PROJECT_KEYS")
    return not allowed or str(project_key) in allowed


def create_app(config_path=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    load_app_config(app, config_path)

    # Enable CORS for frontend
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config["CORS_ORIGINS"],
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": [
                "Content-Type",
                "X-Backlog-Space", "X-Backlog-Api-Key", "X-Backlog-Base-Url"
            ]
        }
    })

    # Register blueprints
    from app.api import auth, projects, metrics
    app.register_blueprint(auth.bp)
    app.register_blueprint(projects.bp)
    app.register_blueprint(metrics.bp)

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok"}

    return app
