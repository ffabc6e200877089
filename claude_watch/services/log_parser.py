"""Parser for the CLI's plain-text debug log lines."""

import re
from datetime import datetime, timezone

from claude_watch.models.log_entry import LogEntry, LogLevel

# 2026-01-29T21:16:26.939Z [DEBUG] message...
LOG_LINE_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}T[\d:.]+Z)\s+\[(DEBUG|INFO|ERROR)\]\s+(.*)$")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp with a trailing ``Z``.

    Returns:
        Timezone-aware UTC datetime, or None if unparseable.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class LogParser:
    """Turns ``TIMESTAMP [LEVEL] message`` lines into LogEntry records.

    Lines that do not follow the grammar are skipped; not every debug log
    line is structured.
    """

    @staticmethod
    def parse(line: str, session_id: str | None = None) -> LogEntry | None:
        match = LOG_LINE_PATTERN.match(line)
        if not match:
            return None

        timestamp = parse_timestamp(match.group(1))
        if timestamp is None:
            return None

        return LogEntry(
            timestamp=timestamp,
            level=LogLevel(match.group(2)),
            message=match.group(3),
            session_id=session_id,
        )
