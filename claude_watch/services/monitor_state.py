"""Published monitor state.

MonitorState is the one place the polling loops write their results and
the API reads them. Every accessor returns a copy.
"""

import threading
from collections import deque
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import PurePath

from claude_watch.models.activity import ConflictSeverity, FileConflict, ToolOperation
from claude_watch.models.instance import Instance, InstanceGroup
from claude_watch.models.log_entry import LogEntry, LogLevel
from claude_watch.models.session import TokenUsage

DEFAULT_MAX_LOG_ENTRIES = 10_000
DEFAULT_MAX_RECENT_OPERATIONS = 100
RECENT_ERROR_WINDOW = timedelta(seconds=60)


class MonitorStatus(str, Enum):
    """Overall status shown in the status summary."""

    IDLE = "idle"
    ACTIVE = "active"
    WARNING = "warning"


def _sort_key(instance: Instance) -> tuple[str, int]:
    return PurePath(instance.working_directory).name.lower(), instance.pid


class MonitorState:
    """Thread-safe store of the latest derived state."""

    def __init__(
        self,
        max_log_entries: int = DEFAULT_MAX_LOG_ENTRIES,
        max_recent_operations: int = DEFAULT_MAX_RECENT_OPERATIONS,
    ):
        self._instances: list[Instance] = []
        self._log_entries: deque[LogEntry] = deque(maxlen=max_log_entries)
        self._recent_operations: deque[ToolOperation] = deque(maxlen=max_recent_operations)
        self._conflicts: list[FileConflict] = []
        self._sparklines: dict[str, str] = {}
        self._current_actions: dict[str, str] = {}
        self._current_models: dict[str, str] = {}
        self._latest_tokens: dict[str, TokenUsage] = {}
        self._lock = threading.Lock()

    # Instances

    def update_instances(self, new_instances: list[Instance]) -> list[Instance]:
        """Replace the instance list.

        A pid seen on an earlier poll keeps its first recorded start time;
        pids that disappear are forgotten. The list is ordered by working
        directory name (case-insensitive), then pid.

        Returns:
            The stored list.
        """
        with self._lock:
            known_start_times = {i.pid: i.start_time for i in self._instances}
            merged = [
                instance.model_copy(update={"start_time": known_start_times[instance.pid]})
                if instance.pid in known_start_times
                else instance
                for instance in new_instances
            ]
            self._instances = sorted(merged, key=_sort_key)
            return list(self._instances)

    def instances(self) -> list[Instance]:
        with self._lock:
            return list(self._instances)

    def get_instance(self, pid: int) -> Instance | None:
        with self._lock:
            return next((i for i in self._instances if i.pid == pid), None)

    def grouped_instances(self) -> list[InstanceGroup]:
        """Instances grouped by working directory, sorted by group name."""
        groups: dict[str, list[Instance]] = {}
        for instance in self.instances():
            groups.setdefault(instance.working_directory, []).append(instance)
        return sorted(
            (InstanceGroup(working_directory=wd, instances=items) for wd, items in groups.items()),
            key=lambda group: group.display_name.lower(),
        )

    # Debug log

    def add_log_entries(self, entries: list[LogEntry]) -> None:
        """Append entries, dropping the oldest beyond the buffer size."""
        with self._lock:
            self._log_entries.extend(entries)

    def log_entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._log_entries)

    def filtered_logs(
        self, level: LogLevel | None = None, query: str | None = None
    ) -> list[LogEntry]:
        """Log entries matching a level and a case-insensitive substring."""
        needle = query.casefold() if query else None
        return [
            entry
            for entry in self.log_entries()
            if (level is None or entry.level == level)
            and (needle is None or needle in entry.message.casefold())
        ]

    # Activity and conflicts

    def add_operations(self, operations: list[ToolOperation]) -> None:
        with self._lock:
            self._recent_operations.extend(operations)

    def recent_operations(self) -> list[ToolOperation]:
        with self._lock:
            return list(self._recent_operations)

    def update_conflicts(self, conflicts: list[FileConflict]) -> None:
        with self._lock:
            self._conflicts = list(conflicts)

    def active_conflicts(self) -> list[FileConflict]:
        with self._lock:
            return list(self._conflicts)

    @property
    def has_active_conflicts(self) -> bool:
        with self._lock:
            return bool(self._conflicts)

    @property
    def critical_conflict_count(self) -> int:
        with self._lock:
            return sum(1 for c in self._conflicts if c.severity == ConflictSeverity.CRITICAL)

    def update_sparkline(self, session_id: str, sparkline: str) -> None:
        with self._lock:
            self._sparklines[session_id] = sparkline

    def update_session_live_data(
        self,
        session_id: str,
        action: str | None = None,
        model: str | None = None,
        tokens: TokenUsage | None = None,
    ) -> None:
        """Record live data; None leaves the previous value in place."""
        with self._lock:
            if action is not None:
                self._current_actions[session_id] = action
            if model is not None:
                self._current_models[session_id] = model
            if tokens is not None:
                self._latest_tokens[session_id] = tokens

    def session_snapshot(self, session_id: str) -> dict:
        """Sparkline and live data of one session."""
        with self._lock:
            return {
                "session_id": session_id,
                "sparkline": self._sparklines.get(session_id),
                "current_action": self._current_actions.get(session_id),
                "model": self._current_models.get(session_id),
                "tokens": self._latest_tokens.get(session_id),
            }

    def forget_session(self, session_id: str) -> None:
        """Drop the sparkline and live data of a session no longer observed."""
        with self._lock:
            self._sparklines.pop(session_id, None)
            self._current_actions.pop(session_id, None)
            self._current_models.pop(session_id, None)
            self._latest_tokens.pop(session_id, None)

    def sparklines(self) -> dict[str, str]:
        with self._lock:
            return dict(self._sparklines)

    # Summary

    def status(self, now: datetime | None = None) -> MonitorStatus:
        """Idle with no instances, warning on an ERROR in the last minute."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - RECENT_ERROR_WINDOW
        with self._lock:
            if not self._instances:
                return MonitorStatus.IDLE
            has_recent_error = any(
                entry.level == LogLevel.ERROR and entry.timestamp > cutoff
                for entry in self._log_entries
            )
        return MonitorStatus.WARNING if has_recent_error else MonitorStatus.ACTIVE
