"""Activity models: tailing checkpoints, tool operations and file conflicts."""

import uuid
from datetime import datetime
from enum import Enum
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict, Field


class FilePosition(BaseModel):
    """Tailing checkpoint for one file.

    Marks how much of the file has been consumed: the byte offset of the
    next unread byte and the modification time observed at that read.
    """

    path: str
    offset: int = 0
    last_modified: float = 0.0


class ToolType(str, Enum):
    """Kind of tool invocation detected in a session transcript."""

    READ = "read"
    WRITE = "write"
    EDIT = "edit"
    BASH = "bash"
    GREP = "grep"
    GLOB = "glob"
    SEARCH = "search"
    TASK = "task"

    @property
    def label(self) -> str:
        """Display label for the tool."""
        if self is ToolType.TASK:
            return "Agent"
        return self.value.capitalize()

    @property
    def is_write_operation(self) -> bool:
        """Whether the tool modifies its target file."""
        return self in (ToolType.WRITE, ToolType.EDIT)


class ToolOperation(BaseModel):
    """A single tool invocation parsed from a session JSONL line."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime
    session_id: str
    agent_id: str | None = None
    tool: ToolType
    file_path: str | None = None
    is_write: bool = False

    @property
    def source(self) -> tuple[str, str]:
        """The (session, agent) pair that performed the operation."""
        return (self.session_id, self.agent_id or "main")


class ConflictSeverity(str, Enum):
    """How serious a detected file conflict is."""

    WARNING = "warning"
    """Several sources touched the file, at most one of them wrote."""

    CRITICAL = "critical"
    """At least two of the contributing operations were writes."""

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class FileConflict(BaseModel):
    """Multiple agents touching the same file inside the correlation window."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    file_path: str
    operations: tuple[ToolOperation, ...] = ()
    severity: ConflictSeverity
    detected_at: datetime

    @property
    def file_name(self) -> str:
        return PurePath(self.file_path).name


class SessionIndexEntry(BaseModel):
    """One entry of a project's sessions-index.json."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    project_path: str = Field(..., alias="projectPath")
    modified: str = ""


class SessionsIndexFile(BaseModel):
    """Schema of sessions-index.json."""

    version: int = 1
    entries: list[SessionIndexEntry] = Field(default_factory=list)
