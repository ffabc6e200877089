"""Incremental file reading for append-only transcripts.

Keeps a byte-offset/mtime checkpoint per file so each poll returns only the
lines appended since the previous one, and caches small sessions-index.json
files for a few seconds so fast polling does not re-read them constantly.
"""

import logging
import os
import threading
import time
from collections.abc import Callable
from pathlib import Path

from claude_watch.models.activity import FilePosition, SessionIndexEntry
from claude_watch.services.claude_paths import SESSIONS_INDEX_FILENAME, load_sessions_index

logger = logging.getLogger(__name__)

DEFAULT_INDEX_TTL = 5.0


class FileTracker:
    """Tracks read positions of tailed files.

    All checkpoint and cache state is private and guarded by one lock;
    callers only see copies.
    """

    def __init__(
        self,
        projects_dir: Path | None = None,
        index_ttl: float = DEFAULT_INDEX_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the tracker.

        Args:
            projects_dir: Root of per-project transcript directories, used by
                get_session_index. Defaults to ~/.claude/projects.
            index_ttl: Seconds a parsed sessions index stays cached.
            clock: Monotonic clock used for cache expiry.
        """
        self.projects_dir = projects_dir or Path.home() / ".claude" / "projects"
        self.index_ttl = index_ttl
        self._clock = clock
        self._positions: dict[str, FilePosition] = {}
        self._index_cache: dict[str, tuple[list[SessionIndexEntry], float]] = {}
        self._lock = threading.Lock()

    def read_new_lines(self, path: str | Path) -> list[str]:
        """Read the complete lines appended to a file since the last call.

        A file whose modification time and size both match the checkpoint is
        skipped without opening it. A file smaller than the checkpoint was
        truncated or replaced and is read again from the start. Bytes after
        the last newline are a line still being written; they stay unread
        until the newline arrives. If the read fails the checkpoint is left
        untouched so the next poll retries.

        The file is read without holding the tracker lock, so index lookups
        from other threads never wait on a large read.

        Args:
            path: File to read.

        Returns:
            Non-empty lines in file order.
        """
        key = str(path)
        try:
            stat = os.stat(key)
        except OSError:
            return []

        with self._lock:
            position = self._positions.get(key)
        if (
            position is not None
            and position.last_modified == stat.st_mtime
            and position.offset == stat.st_size
        ):
            return []

        start = position.offset if position is not None else 0
        if stat.st_size < start:
            logger.debug(f"{key} shrank below offset {start}, re-reading from start")
            start = 0

        try:
            with open(key, "rb") as f:
                f.seek(start)
                data = f.read()
        except OSError as e:
            logger.debug(f"Failed to read {key}: {e}")
            return []

        complete = data[: data.rfind(b"\n") + 1]
        with self._lock:
            # Another reader advanced the checkpoint meanwhile; its lines win.
            if self._positions.get(key) is not position:
                return []
            self._positions[key] = FilePosition(
                path=key,
                offset=start + len(complete),
                last_modified=stat.st_mtime,
            )

        text = complete.decode("utf-8", errors="replace")
        return [line for line in text.split("\n") if line]

    def prime(self, path: str | Path) -> None:
        """Mark a file as fully consumed without reading it."""
        key = str(path)
        try:
            stat = os.stat(key)
        except OSError:
            return
        with self._lock:
            self._positions[key] = FilePosition(
                path=key, offset=stat.st_size, last_modified=stat.st_mtime
            )

    def get_position(self, path: str | Path) -> FilePosition | None:
        """Get a copy of the checkpoint for a file."""
        with self._lock:
            position = self._positions.get(str(path))
            return position.model_copy() if position else None

    def tracked_paths(self) -> list[str]:
        with self._lock:
            return list(self._positions)

    def get_session_index(self, encoded_project_path: str) -> list[SessionIndexEntry] | None:
        """Get a project's session index, re-reading it when the cache is stale.

        Args:
            encoded_project_path: Project directory name under projects_dir.

        Returns:
            Index entries, or None if the project has no readable index.
        """
        now = self._clock()
        with self._lock:
            cached = self._index_cache.get(encoded_project_path)
            if cached is not None and now - cached[1] < self.index_ttl:
                return list(cached[0])

        index = load_sessions_index(
            self.projects_dir / encoded_project_path / SESSIONS_INDEX_FILENAME
        )
        if index is None:
            return None

        with self._lock:
            self._index_cache[encoded_project_path] = (list(index.entries), now)
        return list(index.entries)

    def reset_position(self, path: str | Path) -> None:
        """Forget the checkpoint for a file so it is read from the start."""
        with self._lock:
            self._positions.pop(str(path), None)

    def clear_cache(self) -> None:
        """Drop all checkpoints and cached indexes."""
        with self._lock:
            self._positions.clear()
            self._index_cache.clear()
