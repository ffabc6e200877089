"""Debug log routes for claude-watch."""

from flask import Blueprint, jsonify, request

from claude_watch.models.log_entry import LogLevel
from claude_watch.routes._state import get_state
from claude_watch.services.serializers import log_entry_to_dict

logs_bp = Blueprint("logs", __name__)

DEFAULT_LIMIT = 500


@logs_bp.route("/logs", methods=["GET"])
def list_logs():
    """Buffered debug-log entries, newest last.

    Query params:
        level: DEBUG, INFO or ERROR.
        q: Case-insensitive substring of the message.
        limit: Max entries returned (default 500).

    Returns:
        JSON object with the matching entries and the total match count.
    """
    level_param = request.args.get("level")
    level = None
    if level_param:
        try:
            level = LogLevel(level_param.upper())
        except ValueError:
            return jsonify({"error": f"Invalid level: {level_param}"}), 400

    try:
        limit = int(request.args.get("limit", DEFAULT_LIMIT))
    except ValueError:
        return jsonify({"error": "limit must be an integer"}), 400

    entries = get_state().filtered_logs(level=level, query=request.args.get("q"))
    return jsonify(
        {
            "entries": [log_entry_to_dict(e) for e in entries[-limit:]] if limit > 0 else [],
            "total": len(entries),
        }
    )
