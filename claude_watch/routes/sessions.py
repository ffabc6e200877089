"""Session routes for claude-watch.

- GET /api/sessions/<session_id> - Sparkline, current action, model, tokens
- GET /api/sessions/<session_id>/turns - Parsed transcript, newest first
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from claude_watch.models.config import AppConfig
from claude_watch.routes._state import get_state
from claude_watch.services.claude_paths import session_file_path
from claude_watch.services.serializers import instance_to_dict, session_to_dict
from claude_watch.services.session_parser import SessionParser

logger = logging.getLogger(__name__)

sessions_bp = Blueprint("sessions", __name__)

DEFAULT_TURN_LIMIT = 50


def _instance_for_session(session_id: str):
    return next((i for i in get_state().instances() if i.session_id == session_id), None)


@sessions_bp.route("/sessions/<session_id>", methods=["GET"])
def get_session(session_id: str):
    """Live data of a session and the instance running it."""
    instance = _instance_for_session(session_id)
    data = session_to_dict(get_state().session_snapshot(session_id))
    data["instance"] = instance_to_dict(instance) if instance else None
    return jsonify(data)


@sessions_bp.route("/sessions/<session_id>/turns", methods=["GET"])
def get_session_turns(session_id: str):
    """Conversation turns of a running session's transcript.

    Query params:
        limit: Max turns returned (default 50).

    Returns:
        JSON object with turns, newest first. 404 if no running instance
        owns the session.
    """
    instance = _instance_for_session(session_id)
    if instance is None:
        return jsonify({"error": f"No running instance for session {session_id}"}), 404

    try:
        limit = int(request.args.get("limit", DEFAULT_TURN_LIMIT))
    except ValueError:
        return jsonify({"error": "limit must be an integer"}), 400

    config: AppConfig = current_app.extensions.get("config") or AppConfig()
    path = session_file_path(config.projects_dir, instance.working_directory, session_id)
    turns = SessionParser().parse(path)
    logger.debug(f"[API] {len(turns)} turns parsed from {path}")

    result = []
    for turn in turns[: max(limit, 0)]:
        data = turn.model_dump(mode="json")
        data["display_model"] = turn.display_model
        result.append(data)
    return jsonify({"session_id": session_id, "turns": result, "total": len(turns)})
