"""Cross-agent file conflict detection.

Two horizons are involved. Operations on a path are correlated inside a
short sliding window; a conflict raised from that window stays visible
until the longer expiry horizon passes without renewed activity.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone

from claude_watch.models.activity import ConflictSeverity, FileConflict, ToolOperation

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 5.0
DEFAULT_EXPIRY_SECONDS = 10.0


class ConflictDetector:
    """Flags files touched by two or more (session, agent) sources at once."""

    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        expiry_seconds: float = DEFAULT_EXPIRY_SECONDS,
    ):
        """Initialize the detector.

        Args:
            window_seconds: Width of the per-path correlation window.
            expiry_seconds: How long a conflict stays active after detection.
        """
        self.window = timedelta(seconds=window_seconds)
        self.expiry = timedelta(seconds=expiry_seconds)
        self._recent_ops: dict[str, list[ToolOperation]] = {}
        self._conflicts: dict[str, FileConflict] = {}
        self._lock = threading.Lock()

    def record(self, op: ToolOperation, now: datetime | None = None) -> FileConflict | None:
        """Add an operation to its path's window and check for a conflict.

        Operations older than the window are evicted before the new one is
        appended. A conflict replaces any existing record for the same path.

        Args:
            op: The operation to record.
            now: Current time; defaults to the wall clock.

        Returns:
            The conflict raised or renewed by this operation, if any.
        """
        if not op.file_path:
            return None
        now = now or datetime.now(timezone.utc)
        cutoff = now - self.window

        with self._lock:
            window = [o for o in self._recent_ops.get(op.file_path, []) if o.timestamp > cutoff]
            window.append(op)
            self._recent_ops[op.file_path] = window

            sources = {o.source for o in window}
            if len(sources) < 2:
                return None

            write_count = sum(1 for o in window if o.is_write)
            severity = ConflictSeverity.CRITICAL if write_count >= 2 else ConflictSeverity.WARNING
            conflict = FileConflict(
                file_path=op.file_path,
                operations=tuple(window),
                severity=severity,
                detected_at=now,
            )
            is_new = op.file_path not in self._conflicts
            self._conflicts[op.file_path] = conflict

        if is_new:
            logger.info(
                f"{severity.value} conflict on {op.file_path}: "
                f"{len(sources)} sources, {write_count} writes"
            )
        return conflict

    def prune_expired(self, now: datetime | None = None) -> None:
        """Drop expired conflicts and trim every path's window.

        Conflicts are dropped by detection time alone, regardless of how many
        operations are still inside the correlation window.
        """
        now = now or datetime.now(timezone.utc)
        conflict_cutoff = now - self.expiry
        op_cutoff = now - self.window

        with self._lock:
            self._conflicts = {
                path: conflict
                for path, conflict in self._conflicts.items()
                if conflict.detected_at >= conflict_cutoff
            }
            for path in list(self._recent_ops):
                window = [o for o in self._recent_ops[path] if o.timestamp > op_cutoff]
                if window:
                    self._recent_ops[path] = window
                else:
                    del self._recent_ops[path]

    def active_conflicts(self) -> list[FileConflict]:
        """Snapshot of the active conflicts in detection order."""
        with self._lock:
            return list(self._conflicts.values())

    def conflict_summary(self) -> tuple[int, int]:
        """Return (warning count, critical count)."""
        conflicts = self.active_conflicts()
        critical = sum(1 for c in conflicts if c.severity == ConflictSeverity.CRITICAL)
        return len(conflicts) - critical, critical

    def tracked_path_count(self) -> int:
        with self._lock:
            return len(self._recent_ops)

    def clear_all(self) -> None:
        with self._lock:
            self._conflicts.clear()
            self._recent_ops.clear()
