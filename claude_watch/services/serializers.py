"""JSON payloads shared by the API routes and SSE events."""

from claude_watch.models.activity import FileConflict, ToolOperation
from claude_watch.models.instance import Instance, InstanceGroup
from claude_watch.models.log_entry import LogEntry
from claude_watch.models.session import TokenUsage


def instance_to_dict(instance: Instance) -> dict:
    data = instance.model_dump(mode="json")
    data["display_name"] = instance.display_name
    data["display_flags"] = instance.display_flags
    data["is_dangerous_mode"] = instance.is_dangerous_mode
    for agent, agent_data in zip(instance.agents, data["agents"]):
        agent_data["display_name"] = agent.type.display_name
    return data


def group_to_dict(group: InstanceGroup) -> dict:
    return {
        "working_directory": group.working_directory,
        "display_name": group.display_name,
        "active_count": group.active_count,
        "instances": [instance_to_dict(i) for i in group.instances],
    }


def operation_to_dict(op: ToolOperation) -> dict:
    data = op.model_dump(mode="json")
    data["label"] = op.tool.label
    return data


def conflict_to_dict(conflict: FileConflict) -> dict:
    return {
        "id": conflict.id,
        "file_path": conflict.file_path,
        "file_name": conflict.file_name,
        "severity": conflict.severity.value,
        "detected_at": conflict.detected_at.isoformat(),
        "operations": [operation_to_dict(op) for op in conflict.operations],
    }


def log_entry_to_dict(entry: LogEntry) -> dict:
    return entry.model_dump(mode="json")


def tokens_to_dict(tokens: TokenUsage | None) -> dict | None:
    if tokens is None:
        return None
    data = tokens.model_dump(mode="json")
    data["total_input"] = tokens.total_input
    data["badge"] = tokens.formatted_badge
    return data


def session_to_dict(snapshot: dict) -> dict:
    """Serialize a MonitorState session snapshot."""
    return {**snapshot, "tokens": tokens_to_dict(snapshot.get("tokens"))}
