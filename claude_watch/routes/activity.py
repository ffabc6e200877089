"""Activity routes for claude-watch.

- GET /api/conflicts - Active file conflicts
- GET /api/operations - Recent tool operations, oldest first
"""

from flask import Blueprint, jsonify, request

from claude_watch.models.activity import ConflictSeverity
from claude_watch.routes._state import get_state
from claude_watch.services.serializers import conflict_to_dict, operation_to_dict

activity_bp = Blueprint("activity", __name__)


@activity_bp.route("/conflicts", methods=["GET"])
def list_conflicts():
    conflicts = get_state().active_conflicts()
    critical = sum(1 for c in conflicts if c.severity == ConflictSeverity.CRITICAL)
    return jsonify(
        {
            "conflicts": [conflict_to_dict(c) for c in conflicts],
            "warning_count": len(conflicts) - critical,
            "critical_count": critical,
        }
    )


@activity_bp.route("/operations", methods=["GET"])
def list_operations():
    """Recent operations.

    Query params:
        session_id: Only operations of this session.
    """
    operations = get_state().recent_operations()
    session_id = request.args.get("session_id")
    if session_id:
        operations = [op for op in operations if op.session_id == session_id]
    return jsonify({"operations": [operation_to_dict(op) for op in operations]})
