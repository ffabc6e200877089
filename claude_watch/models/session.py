"""Conversation models reconstructed from session JSONL transcripts."""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from claude_watch.models.agent import AgentStatus, AgentType

MODEL_FAMILIES = ("opus", "sonnet", "haiku")


def string_value(mapping: Mapping[str, Any] | None, *keys: str) -> str | None:
    """Return the first value under ``keys`` that is a string.

    Tool inputs are arbitrary JSON; this is the one place they are narrowed.
    """
    if not isinstance(mapping, Mapping):
        return None
    for key in keys:
        value = mapping.get(key)
        if isinstance(value, str):
            return value
    return None


def display_model(model: str | None) -> str | None:
    """Short label for a model id.

    ``claude-opus-4-6-20251101`` becomes ``OPUS 4.6``; a family without a
    parseable version becomes just the family; unknown ids pass through.
    A date stamp after the major version is not a minor version.
    """
    if not model or model == "<synthetic>":
        return None
    parts = model.split("-")
    for family in MODEL_FAMILIES:
        if family not in model:
            continue
        label = family.upper()
        if family in parts:
            idx = parts.index(family)
            if idx + 2 < len(parts):
                major, minor = parts[idx + 1], parts[idx + 2]
                if major.isdigit() and minor.isdigit() and len(minor) <= 2:
                    return f"{label} {int(major)}.{int(minor)}"
        return label
    return model


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ToolCallInput(BaseModel):
    """The interesting parts of a tool's input plus the full JSON."""

    model_config = ConfigDict(frozen=True)

    file_path: str | None = None
    command: str | None = None
    pattern: str | None = None
    raw: dict[str, JsonValue] = Field(default_factory=dict)
    raw_json: str = "{}"


class ToolCallResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_success: bool
    content: str | None = None
    error_message: str | None = None


class ToolCall(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    input: ToolCallInput
    result: ToolCallResult | None = None
    timestamp: datetime


class TokenUsage(BaseModel):
    """Token counters reported on an assistant message."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0

    @property
    def total_input(self) -> int:
        return self.input_tokens + self.cache_read_tokens + self.cache_creation_tokens

    @property
    def formatted_badge(self) -> str:
        return (
            f"↓{self.total_input / 1000:.1f}k "
            f"↑{self.output_tokens / 1000:.1f}k "
            f"⚡{self.cache_read_tokens / 1000:.1f}k"
        )

    @classmethod
    def from_usage(cls, usage: Mapping[str, Any]) -> "TokenUsage":
        """Build from the ``usage`` object of a transcript message."""

        def _int(key: str) -> int:
            value = usage.get(key)
            return value if isinstance(value, int) else 0

        return cls(
            input_tokens=_int("input_tokens"),
            output_tokens=_int("output_tokens"),
            cache_read_tokens=_int("cache_read_input_tokens"),
            cache_creation_tokens=_int("cache_creation_input_tokens"),
        )


class AgentSummary(BaseModel):
    """A sub-agent spawn seen inside an assistant turn."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: AgentType = AgentType.UNKNOWN
    turn_count: int = 0
    status: AgentStatus = AgentStatus.RUNNING
    parent_turn_id: str


class ConversationTurn(BaseModel):
    """One user prompt or assistant response."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    role: TurnRole = TurnRole.ASSISTANT
    text: str | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    token_usage: TokenUsage | None = None
    agent_spawns: list[AgentSummary] = Field(default_factory=list)
    model: str | None = None

    @property
    def display_model(self) -> str | None:
        return display_model(self.model)
