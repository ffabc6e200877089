"""Instance model - one observed Claude Code CLI process."""

from datetime import datetime
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict, Field

from claude_watch.models.agent import Agent

UNKNOWN_TERMINAL = "Unknown"

# Human-readable labels for well-known CLI flags. None hides the flag
# (dangerous mode is surfaced separately).
FLAG_LABELS: dict[str, str | None] = {
    "--dangerously-skip-permissions": None,
    "-c": "continue",
    "--continue": "continue",
    "-r": "resume",
    "--resume": "resume",
    "-p": "print",
    "--print": "print",
    "--verbose": "verbose",
    "--no-cache": "no-cache",
    "--allowedTools": "tools-restricted",
    "--disallowedTools": "tools-blocked",
    "--model": "custom-model",
    "--max-tokens": "max-tokens",
    "--max-turns": "max-turns",
}


class Instance(BaseModel):
    """A running Claude Code process with its correlated session.

    The pid is the identity key. Instances are rebuilt on every discovery
    poll; MonitorState carries ``start_time`` forward for pids it has
    already seen.
    """

    model_config = ConfigDict(frozen=True)

    pid: int = Field(..., description="Process ID (identity key)")
    working_directory: str = Field(..., description="Current working directory of the process")
    session_id: str | None = Field(default=None, description="Correlated session UUID")
    start_time: datetime = Field(default_factory=datetime.now)
    arguments: list[str] = Field(default_factory=list)
    agents: list[Agent] = Field(default_factory=list)
    is_active: bool = Field(default=True, description="CPU usage above the liveness threshold")
    terminal_app: str = Field(default=UNKNOWN_TERMINAL, description="Hosting terminal app")
    cpu_percent: float = 0.0
    memory_mb: int = 0
    tty: str | None = None

    @property
    def flags(self) -> list[str]:
        """All dash-prefixed arguments."""
        return [arg for arg in self.arguments if arg.startswith("-")]

    @property
    def is_dangerous_mode(self) -> bool:
        return "--dangerously-skip-permissions" in self.arguments

    def has_flag(self, flag: str) -> bool:
        return flag in self.arguments

    @property
    def display_flags(self) -> list[str]:
        labels = []
        for flag in self.flags:
            if flag in FLAG_LABELS:
                label = FLAG_LABELS[flag]
            else:
                label = flag.strip("-") or None
            if label:
                labels.append(label)
        return labels

    @property
    def display_name(self) -> str:
        return PurePath(self.working_directory).name or self.working_directory


class InstanceGroup(BaseModel):
    """Instances sharing a working directory."""

    model_config = ConfigDict(frozen=True)

    working_directory: str
    instances: list[Instance] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return PurePath(self.working_directory).name or self.working_directory

    @property
    def active_count(self) -> int:
        return sum(1 for instance in self.instances if instance.is_active)
