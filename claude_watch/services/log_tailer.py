"""Tails the CLI's per-session debug logs."""

import logging
from pathlib import Path

from claude_watch.models.log_entry import LogEntry
from claude_watch.services.file_tracker import FileTracker
from claude_watch.services.log_parser import LogParser

logger = logging.getLogger(__name__)


class LogTailer:
    """Emits structured entries for lines appended to ``<debug_dir>/*.txt``.

    Logs that already exist when tailing starts are skipped to their end so
    history is not replayed; logs created afterwards are read in full.
    """

    def __init__(self, debug_dir: Path, file_tracker: FileTracker | None = None):
        self.debug_dir = Path(debug_dir)
        self.file_tracker = file_tracker or FileTracker()
        self._primed = False

    def poll(self) -> list[LogEntry]:
        """Run one tail pass over every debug log.

        Returns:
            New entries, grouped by file and in line order within a file.
        """
        try:
            log_files = sorted(p for p in self.debug_dir.glob("*.txt") if not p.name.startswith("."))
        except OSError as e:
            logger.debug(f"Cannot list {self.debug_dir}: {e}")
            return []

        if not self._primed:
            for path in log_files:
                self.file_tracker.prime(path)
            self._primed = True
            logger.debug(f"Primed {len(log_files)} debug logs at end of file")
            return []

        entries = []
        for path in log_files:
            session_id = path.stem
            for line in self.file_tracker.read_new_lines(path):
                entry = LogParser.parse(line, session_id=session_id)
                if entry is not None:
                    entries.append(entry)
        return entries

    def close(self) -> None:
        """Drop all checkpoints; the next poll primes again."""
        self.file_tracker.clear_cache()
        self._primed = False
