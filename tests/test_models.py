"""Tests for domain model helpers."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from claude_watch.models import (
    AgentType,
    ConflictSeverity,
    Instance,
    InstanceGroup,
    TokenUsage,
    ToolOperation,
    ToolType,
    display_model,
    string_value,
)

NOW = datetime(2026, 1, 29, 21, 0, tzinfo=timezone.utc)


class TestInstance:
    """Tests for Instance display helpers."""

    def test_display_flags(self):
        instance = Instance(
            pid=1,
            working_directory="/Users/dev/api",
            arguments=["claude", "--dangerously-skip-permissions", "-c", "--model", "opus", "--fast"],
        )

        assert instance.flags == ["--dangerously-skip-permissions", "-c", "--model", "--fast"]
        assert instance.display_flags == ["continue", "custom-model", "fast"]
        assert instance.is_dangerous_mode
        assert instance.has_flag("--model")

    def test_display_name(self):
        assert Instance(pid=1, working_directory="/Users/dev/api/").display_name == "api"
        assert Instance(pid=1, working_directory="/").display_name == "/"

    def test_frozen(self):
        instance = Instance(pid=1, working_directory="/w")

        with pytest.raises(ValidationError):
            instance.pid = 2

    def test_group_counts(self):
        group = InstanceGroup(
            working_directory="/w/api",
            instances=[
                Instance(pid=1, working_directory="/w/api", is_active=True),
                Instance(pid=2, working_directory="/w/api", is_active=False),
            ],
        )

        assert group.display_name == "api"
        assert group.active_count == 1


class TestAgentType:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Explore", AgentType.EXPLORE),
            ("general-purpose", AgentType.GENERAL),
            ("codeReview", AgentType.CODE_REVIEW),
            ("prompt_suggestion", AgentType.PROMPT_SUGGESTION),
            ("mystery", AgentType.UNKNOWN),
            (None, AgentType.UNKNOWN),
        ],
    )
    def test_from_string(self, value, expected):
        assert AgentType.from_string(value) == expected

    def test_display_name(self):
        assert AgentType.CODE_REVIEW.display_name == "Code Review"


class TestToolType:
    def test_labels(self):
        assert ToolType.TASK.label == "Agent"
        assert ToolType.GREP.label == "Grep"

    def test_write_operations(self):
        assert {t for t in ToolType if t.is_write_operation} == {ToolType.WRITE, ToolType.EDIT}

    def test_operation_source_defaults_to_main(self):
        op = ToolOperation(timestamp=NOW, session_id="s", tool=ToolType.READ)

        assert op.source == ("s", "main")
        assert ConflictSeverity.CRITICAL.display_name == "Critical"


class TestDisplayModel:
    @pytest.mark.parametrize(
        "model,expected",
        [
            ("claude-opus-4-6-20251101", "OPUS 4.6"),
            ("claude-haiku-4-5", "HAIKU 4.5"),
            ("claude-sonnet-4-20250514", "SONNET"),
            ("claude-3-5-sonnet-20241022", "SONNET"),
            ("gpt-4", "gpt-4"),
            ("<synthetic>", None),
            (None, None),
        ],
    )
    def test_display_model(self, model, expected):
        assert display_model(model) == expected


class TestTokenUsage:
    def test_from_usage(self):
        usage = TokenUsage.from_usage(
            {
                "input_tokens": 1200,
                "output_tokens": 300,
                "cache_read_input_tokens": 45000,
                "cache_creation_input_tokens": "lots",
            }
        )

        assert usage.cache_creation_tokens == 0
        assert usage.total_input == 46200
        assert usage.formatted_badge == "↓46.2k ↑0.3k ⚡45.0k"


class TestStringValue:
    def test_first_string_wins(self):
        assert string_value({"file_path": 3, "path": "/a", "pattern": "b"}, "file_path", "path") == "/a"

    def test_non_mapping(self):
        assert string_value(None, "x") is None
        assert string_value(["x"], "x") is None
