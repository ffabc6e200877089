"""Session transcript parsing for claude-watch.

This module handles:
- Reconstructing conversation turns from a session JSONL transcript
- Resumable parsing from a byte offset
- Live data extraction (current action, model, token usage) from new lines
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from claude_watch.models.agent import AgentStatus, AgentType
from claude_watch.models.session import (
    AgentSummary,
    ConversationTurn,
    TokenUsage,
    ToolCall,
    ToolCallInput,
    ToolCallResult,
    TurnRole,
    display_model,
    string_value,
)
from claude_watch.services.log_parser import parse_timestamp

logger = logging.getLogger(__name__)

# Tool whose invocations spawn a sub-agent rather than touching files
AGENT_SPAWN_TOOL = "Task"

MAX_ACTION_COMMAND_CHARS = 40
MAX_ACTION_TEXT_CHARS = 60


def parse_jsonl_line(line: str) -> dict | None:
    """Parse a single JSONL line into a dict, or None if it isn't one."""
    line = line.strip()
    if not line:
        return None
    try:
        entry = json.loads(line)
    except ValueError:
        return None
    return entry if isinstance(entry, dict) else None


def message_content(entry: dict) -> list[dict] | None:
    """Content items of an entry's message.

    Plain-string content is wrapped as a single text item.
    """
    message = entry.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    if isinstance(content, list):
        return [item for item in content if isinstance(item, dict)]
    return None


def _result_text(value: Any) -> str | None:
    """Flatten a tool_result payload (string or list of parts) to text."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        parts = []
        for part in value:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "\n".join(parts)
    return None


@dataclass
class LiveData:
    """Most recent state of a session, taken from freshly read lines."""

    action: str | None = None
    model: str | None = None
    tokens: TokenUsage | None = None


class SessionParser:
    """Builds ConversationTurns from a session transcript."""

    def parse(self, session_path: str | Path) -> list[ConversationTurn]:
        """Parse a whole transcript file.

        Args:
            session_path: Path to the session JSONL file.

        Returns:
            Turns, newest first. Empty if the file can't be read.
        """
        try:
            content = Path(session_path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug(f"Cannot read transcript {session_path}: {e}")
            return []
        return self.parse_content(content)

    def parse_incremental(
        self, session_path: str | Path, from_offset: int = 0
    ) -> tuple[list[ConversationTurn], int]:
        """Parse only the bytes after ``from_offset``.

        Args:
            session_path: Path to the session JSONL file.
            from_offset: Byte offset returned by the previous call.

        Returns:
            Tuple of (turns newest first, new offset to persist). On failure
            the offset is returned unchanged.
        """
        try:
            with open(session_path, "rb") as f:
                f.seek(from_offset)
                data = f.read()
        except OSError as e:
            logger.debug(f"Cannot read transcript {session_path} from {from_offset}: {e}")
            return [], from_offset

        turns = self.parse_content(data.decode("utf-8", errors="replace"))
        return turns, from_offset + len(data)

    def parse_content(self, content: str) -> list[ConversationTurn]:
        entries = [entry for entry in map(parse_jsonl_line, content.split("\n")) if entry]
        return self.build_turns(entries)

    def build_turns(self, entries: list[dict]) -> list[ConversationTurn]:
        """Two passes: user entries first (tool results and prompts), then
        assistant entries joined with those results."""
        turns: list[ConversationTurn] = []
        tool_results: dict[str, ToolCallResult] = {}

        for entry in entries:
            if entry.get("type") != "user":
                continue
            uuid = entry.get("uuid")
            content = message_content(entry)
            if not isinstance(uuid, str) or content is None:
                continue

            user_text = []
            for item in content:
                if item.get("type") == "tool_result":
                    tool_id = item.get("tool_use_id")
                    if isinstance(tool_id, str):
                        text = _result_text(item.get("content"))
                        is_error = item.get("is_error") is True
                        tool_results[tool_id] = ToolCallResult(
                            is_success=not is_error,
                            content=None if is_error else text,
                            error_message=text if is_error else None,
                        )
                elif item.get("type") == "text" and isinstance(item.get("text"), str):
                    user_text.append(item["text"])

            if user_text:
                turns.append(
                    ConversationTurn(
                        id=uuid,
                        timestamp=self._timestamp(entry),
                        role=TurnRole.USER,
                        text="\n".join(user_text),
                    )
                )

        for entry in entries:
            if entry.get("type") != "assistant":
                continue
            turn = self._assistant_turn(entry, tool_results)
            if turn is not None:
                turns.append(turn)

        turns.sort(key=lambda turn: turn.timestamp, reverse=True)
        return turns

    def _assistant_turn(
        self, entry: dict, tool_results: dict[str, ToolCallResult]
    ) -> ConversationTurn | None:
        uuid = entry.get("uuid")
        content = message_content(entry)
        if not isinstance(uuid, str) or content is None:
            return None

        message = entry["message"]
        timestamp = self._timestamp(entry)

        texts = [
            item["text"]
            for item in content
            if item.get("type") == "text" and isinstance(item.get("text"), str)
        ]

        tool_calls = []
        agent_spawns = []
        for item in content:
            if item.get("type") != "tool_use":
                continue
            name = item.get("name")
            tool_id = item.get("id") or item.get("tool_use_id")
            if not isinstance(name, str) or not isinstance(tool_id, str):
                continue
            tool_input = item.get("input") if isinstance(item.get("input"), dict) else {}

            if name == AGENT_SPAWN_TOOL:
                agent_spawns.append(
                    AgentSummary(
                        id=tool_id,
                        type=AgentType.from_string(string_value(tool_input, "subagent_type")),
                        status=AgentStatus.RUNNING,
                        parent_turn_id=uuid,
                    )
                )
                continue

            tool_calls.append(
                ToolCall(
                    id=tool_id,
                    name=name,
                    input=ToolCallInput(
                        file_path=string_value(tool_input, "file_path", "path"),
                        command=string_value(tool_input, "command"),
                        pattern=string_value(tool_input, "pattern"),
                        raw=tool_input,
                        raw_json=json.dumps(tool_input),
                    ),
                    result=tool_results.get(tool_id),
                    timestamp=timestamp,
                )
            )

        if not texts and not tool_calls and not agent_spawns:
            return None

        usage = message.get("usage")
        model = message.get("model")
        return ConversationTurn(
            id=uuid,
            timestamp=timestamp,
            role=TurnRole.ASSISTANT,
            text="\n".join(texts) if texts else None,
            tool_calls=tool_calls,
            token_usage=TokenUsage.from_usage(usage) if isinstance(usage, dict) else None,
            agent_spawns=agent_spawns,
            model=model if isinstance(model, str) else None,
        )

    @staticmethod
    def _timestamp(entry: dict) -> datetime:
        return parse_timestamp(entry.get("timestamp")) or datetime.now(timezone.utc)


def describe_action(item: dict) -> str | None:
    """One-line description of a content item, e.g. ``Edit /src/app.py``."""
    if item.get("type") == "tool_use" and isinstance(item.get("name"), str):
        tool_input = item.get("input")
        target = string_value(tool_input, "file_path", "path")
        if target is None:
            command = string_value(tool_input, "command")
            target = command[:MAX_ACTION_COMMAND_CHARS] if command is not None else None
        if target is None:
            target = string_value(tool_input, "pattern")
        return f"{item['name']} {target}" if target is not None else item["name"]

    if item.get("type") == "text":
        text = item.get("text")
        if isinstance(text, str) and text:
            return text[:MAX_ACTION_TEXT_CHARS].replace("\n", " ")
    return None


def extract_live_data(lines: list[str]) -> LiveData:
    """Find the latest action, model label and token usage in new lines.

    Lines are scanned newest first and scanning stops once all three are
    known.
    """
    live = LiveData()
    for line in reversed(lines):
        entry = parse_jsonl_line(line)
        if entry is None:
            continue

        message = entry.get("message")
        if entry.get("type") == "assistant" and isinstance(message, dict):
            if live.model is None and isinstance(message.get("model"), str):
                live.model = display_model(message["model"])
            if live.tokens is None and isinstance(message.get("usage"), dict):
                live.tokens = TokenUsage.from_usage(message["usage"])

        if live.action is None:
            for item in reversed(message_content(entry) or []):
                if item.get("type") in ("tool_use", "text"):
                    action = describe_action(item)
                    if action is not None:
                        live.action = action
                        break

        if live.action is not None and live.model is not None and live.tokens is not None:
            break
    return live
