"""Structured debug-log entry models."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(str, Enum):
    """Levels written by the CLI's debug log."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    ERROR = "ERROR"


class LogEntry(BaseModel):
    """One line of a debug log matching ``TIMESTAMP [LEVEL] message``.

    Attributes:
        id: Unique identifier for the entry.
        timestamp: When the CLI wrote the line (UTC).
        level: Log level.
        message: Everything after the level marker.
        session_id: Session the debug log belongs to (file stem).
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime
    level: LogLevel
    message: str
    session_id: str | None = None
