"""Correlates a CLI process with the session it is writing.

Resolution order:
1. ``--resume <uuid>`` on the command line
2. A recently modified debug log whose session belongs to the project
3. The newest matching entry of a sessions-index.json found by walking the
   working directory upward
"""

import logging
import os
import time
from pathlib import Path, PurePosixPath

from claude_watch.services.claude_paths import (
    encode_project_path,
    is_uuid,
    project_dir,
)
from claude_watch.services.file_tracker import FileTracker

logger = logging.getLogger(__name__)

DEFAULT_RECENCY_SECONDS = 120


class SessionResolver:
    """Derives a session id from process arguments and on-disk state."""

    def __init__(
        self,
        debug_dir: Path,
        projects_dir: Path,
        file_tracker: FileTracker | None = None,
        recency_seconds: float = DEFAULT_RECENCY_SECONDS,
    ):
        """Initialize the resolver.

        Args:
            debug_dir: Directory of ``<uuid>.txt`` debug logs.
            projects_dir: Root of per-project transcript directories.
            file_tracker: Source of cached session indexes.
            recency_seconds: Max debug-log age for the debug-log strategy.
        """
        self.debug_dir = Path(debug_dir)
        self.projects_dir = Path(projects_dir)
        self.file_tracker = file_tracker or FileTracker(projects_dir=self.projects_dir)
        self.recency_seconds = recency_seconds

    def resolve(
        self, arguments: list[str], working_directory: str, now: float | None = None
    ) -> str | None:
        """Find the session id for a process.

        Args:
            arguments: Process arguments (executable first).
            working_directory: Current working directory of the process.
            now: Epoch seconds used for the recency check.

        Returns:
            Session UUID, or None if no strategy produced one.
        """
        session_id = self.from_arguments(arguments)
        if session_id:
            return session_id

        session_id = self.from_debug_logs(working_directory, now=now)
        if session_id:
            return session_id

        return self.from_sessions_index(working_directory)

    @staticmethod
    def from_arguments(arguments: list[str]) -> str | None:
        """Session id passed with ``--resume``, if it is a valid UUID."""
        try:
            index = arguments.index("--resume")
        except ValueError:
            return None
        if index + 1 < len(arguments) and is_uuid(arguments[index + 1]):
            return arguments[index + 1]
        return None

    def from_debug_logs(self, working_directory: str, now: float | None = None) -> str | None:
        """Newest recently-written debug log belonging to the project."""
        now = time.time() if now is None else now
        cutoff = now - self.recency_seconds

        candidates = []
        try:
            with os.scandir(self.debug_dir) as entries:
                for entry in entries:
                    if not entry.name.endswith(".txt") or entry.name.startswith("."):
                        continue
                    try:
                        mtime = entry.stat().st_mtime
                    except OSError:
                        continue
                    candidates.append((mtime, entry.name[: -len(".txt")]))
        except OSError:
            return None

        for mtime, session_id in sorted(candidates, reverse=True):
            if mtime <= cutoff:
                break
            if is_uuid(session_id) and self.session_belongs_to_project(
                session_id, working_directory
            ):
                return session_id
        return None

    def session_belongs_to_project(self, session_id: str, working_directory: str) -> bool:
        base = project_dir(self.projects_dir, working_directory)
        if (base / f"{session_id}.jsonl").is_file():
            return True
        if (base / session_id).is_dir():
            return True
        entries = self.file_tracker.get_session_index(encode_project_path(working_directory))
        return any(entry.session_id == session_id for entry in entries or [])

    def from_sessions_index(self, working_directory: str) -> str | None:
        """Walk upward to the nearest index listing this directory.

        Entries match when their project path equals the working directory
        or is one of its ancestors; the most recently modified one wins.
        """
        current = PurePosixPath(working_directory)
        while str(current) not in ("/", "", "."):
            entries = self.file_tracker.get_session_index(encode_project_path(str(current)))
            matching = [
                entry
                for entry in entries or []
                if entry.project_path == working_directory
                or working_directory.startswith(entry.project_path + "/")
            ]
            if matching:
                newest = max(matching, key=lambda entry: entry.modified)
                return newest.session_id
            current = current.parent
        return None
