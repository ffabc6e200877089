"""Config routes for claude-watch.

- GET /api/config - Effective configuration and where it came from
"""

from flask import Blueprint, current_app, jsonify

config_bp = Blueprint("config", __name__)


@config_bp.route("/config", methods=["GET"])
def get_config():
    config = current_app.extensions.get("config")
    if config is None:
        return jsonify({"error": "Monitor configuration is not loaded"}), 500
    service = current_app.extensions.get("config_service")
    data = config.model_dump(mode="json")
    data["config_path"] = str(service.config_path) if service else None
    data["debug_dir"] = str(config.debug_dir)
    data["projects_dir"] = str(config.projects_dir)
    return jsonify(data)
