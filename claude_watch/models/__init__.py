"""Domain models for claude-watch."""

from claude_watch.models.activity import (
    ConflictSeverity,
    FileConflict,
    FilePosition,
    SessionIndexEntry,
    SessionsIndexFile,
    ToolOperation,
    ToolType,
)
from claude_watch.models.agent import Agent, AgentStatus, AgentType
from claude_watch.models.config import (
    ActivityConfig,
    AgentScanConfig,
    AppConfig,
    ConflictConfig,
    DiscoveryConfig,
    PollingConfig,
)
from claude_watch.models.instance import UNKNOWN_TERMINAL, Instance, InstanceGroup
from claude_watch.models.log_entry import LogEntry, LogLevel
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

__all__ = [
    # Activity
    "ConflictSeverity",
    "FileConflict",
    "FilePosition",
    "SessionIndexEntry",
    "SessionsIndexFile",
    "ToolOperation",
    "ToolType",
    # Agent
    "Agent",
    "AgentStatus",
    "AgentType",
    # Config
    "ActivityConfig",
    "AgentScanConfig",
    "AppConfig",
    "ConflictConfig",
    "DiscoveryConfig",
    "PollingConfig",
    # Instance
    "UNKNOWN_TERMINAL",
    "Instance",
    "InstanceGroup",
    # Log entries
    "LogEntry",
    "LogLevel",
    # Session transcript
    "AgentSummary",
    "ConversationTurn",
    "TokenUsage",
    "ToolCall",
    "ToolCallInput",
    "ToolCallResult",
    "TurnRole",
    "display_model",
    "string_value",
]
