"""Extracts tool operations from session transcript lines."""

import json
from datetime import datetime, timezone

from claude_watch.models.activity import ToolOperation, ToolType
from claude_watch.models.session import string_value
from claude_watch.services.log_parser import parse_timestamp

# Lower-cased tool name -> kind. Names not listed here are ignored.
TOOL_TYPES: dict[str, ToolType] = {
    "read": ToolType.READ,
    "write": ToolType.WRITE,
    "edit": ToolType.EDIT,
    "multiedit": ToolType.EDIT,
    "notebookedit": ToolType.EDIT,
    "bash": ToolType.BASH,
    "grep": ToolType.GREP,
    "glob": ToolType.GLOB,
    "search": ToolType.SEARCH,
    "websearch": ToolType.SEARCH,
    "task": ToolType.TASK,
}

# Input keys that name the target file, in priority order.
TARGET_PATH_KEYS = ("file_path", "path", "notebook_path")


class ToolOperationParser:
    """Parses one JSONL line into the tool operations it contains."""

    def parse(self, line: str, session_id: str) -> list[ToolOperation]:
        """Extract tool invocations from a transcript line.

        Malformed JSON and entries without a content list yield nothing;
        concurrent writers make partial lines normal.

        Args:
            line: One raw JSONL line.
            session_id: Session the transcript belongs to.

        Returns:
            Operations in content order.
        """
        try:
            entry = json.loads(line)
        except ValueError:
            return []
        if not isinstance(entry, dict):
            return []

        message = entry.get("message")
        if not isinstance(message, dict):
            return []
        content = message.get("content")
        if not isinstance(content, list):
            return []

        timestamp = parse_timestamp(entry.get("timestamp")) or datetime.now(timezone.utc)
        agent_id = entry.get("agentId") if isinstance(entry.get("agentId"), str) else None

        operations = []
        for item in content:
            if not isinstance(item, dict) or item.get("type") != "tool_use":
                continue
            name = item.get("name")
            if not isinstance(name, str):
                continue
            tool = TOOL_TYPES.get(name.lower())
            if tool is None:
                continue

            operations.append(
                ToolOperation(
                    timestamp=timestamp,
                    session_id=session_id,
                    agent_id=agent_id,
                    tool=tool,
                    file_path=string_value(item.get("input"), *TARGET_PATH_KEYS),
                    is_write=tool.is_write_operation,
                )
            )
        return operations
