"""Instance routes for claude-watch.

- GET /api/instances - Running CLI instances
- GET /api/instances/groups - Instances grouped by working directory
- GET /api/instances/<pid> - One instance
- GET /api/status - Overall status and counts
"""

from flask import Blueprint, jsonify

from claude_watch.routes._state import get_state
from claude_watch.services.serializers import group_to_dict, instance_to_dict

instances_bp = Blueprint("instances", __name__)


@instances_bp.route("/instances", methods=["GET"])
def list_instances():
    """List instances ordered by working directory name, then pid."""
    instances = get_state().instances()
    return jsonify({"instances": [instance_to_dict(i) for i in instances]})


@instances_bp.route("/instances/groups", methods=["GET"])
def list_groups():
    groups = get_state().grouped_instances()
    return jsonify({"groups": [group_to_dict(g) for g in groups]})


@instances_bp.route("/instances/<int:pid>", methods=["GET"])
def get_instance(pid: int):
    instance = get_state().get_instance(pid)
    if instance is None:
        return jsonify({"error": f"No instance with pid {pid}"}), 404
    return jsonify(instance_to_dict(instance))


@instances_bp.route("/status", methods=["GET"])
def get_status():
    """Overall status.

    Returns:
        JSON object with:
        - status: idle (no instances), warning (ERROR logged in the last
          minute) or active
        - instance_count / active_count
        - conflict_count / critical_conflict_count
    """
    state = get_state()
    instances = state.instances()
    conflicts = state.active_conflicts()
    return jsonify(
        {
            "status": state.status().value,
            "instance_count": len(instances),
            "active_count": sum(1 for i in instances if i.is_active),
            "conflict_count": len(conflicts),
            "critical_conflict_count": state.critical_conflict_count,
        }
    )
