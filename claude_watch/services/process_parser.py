"""Parsing of ``ps aux`` output and hosting-terminal classification."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import PurePosixPath

from claude_watch.backends.base import ProcessInspector
from claude_watch.models.instance import UNKNOWN_TERMINAL

logger = logging.getLogger(__name__)

# USER PID %CPU %MEM VSZ RSS TT STAT STARTED TIME COMMAND
PS_COLUMNS = 11
EXCLUDED_MARKERS = ("Claude Helper", "Claude.app/Contents/Frameworks", "grep")
NO_TTY = ("??", "?")

# Specific names first; "terminal" last so compound helper names such as
# "Cursor Helper: terminal pty-host" classify as the editor.
KNOWN_TERMINALS = [
    "iterm2",
    "iterm",
    "warp",
    "cursor",
    "code",
    "kitty",
    "alacritty",
    "hyper",
    "zed",
    "wezterm",
    "rio",
    "ghostty",
    "tmux",
    "terminal",
]

TERMINAL_LABELS = {
    "iterm2": "iTerm",
    "iterm": "iTerm",
    "code": "VS Code",
    "wezterm": "WezTerm",
    "tmux": "tmux",
}

MAX_ANCESTOR_HOPS = 10


@dataclass
class ProcessRecord:
    """One CLI process row from the process table."""

    pid: int
    cpu_percent: float
    memory_mb: int
    tty: str | None
    start_time: datetime
    arguments: list[str] = field(default_factory=list)


def _to_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def parse_ps_line(line: str, now: datetime | None = None) -> ProcessRecord | None:
    """Parse one ``ps aux`` row, or None if it is not a CLI process."""
    if "claude" not in line or any(marker in line for marker in EXCLUDED_MARKERS):
        return None

    columns = line.split(None, PS_COLUMNS - 1)
    if len(columns) < PS_COLUMNS:
        return None
    try:
        pid = int(columns[1])
    except ValueError:
        return None

    arguments = columns[10].split(" ")
    executable = arguments[0]
    if "claude" not in executable or ".app" in executable:
        return None

    tty = columns[6]
    return ProcessRecord(
        pid=pid,
        cpu_percent=_to_float(columns[2]),
        memory_mb=_to_int(columns[5]) // 1024,
        tty=None if tty in NO_TTY else tty,
        start_time=parse_start_time(columns[8], now=now) or now or datetime.now(),
        arguments=arguments,
    )


def parse_ps_output(output: str, now: datetime | None = None) -> list[ProcessRecord]:
    """Parse the full process table, keeping CLI processes only."""
    records = []
    for line in output.splitlines():
        record = parse_ps_line(line, now=now)
        if record is not None:
            records.append(record)
    return records


def _time_today(parsed: datetime, now: datetime) -> datetime:
    result = now.replace(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)
    # A clock time later than now started yesterday.
    if result > now:
        result -= timedelta(days=1)
    return result


def parse_start_time(value: str, now: datetime | None = None) -> datetime | None:
    """Parse the STARTED column.

    ps prints a clock time for processes started today (``14:05`` or
    ``2:05PM``), month and day for this year (``Jan15``) and a bare year
    for anything older (``2024``).

    Returns:
        Local naive datetime, or None if the token is unrecognised.
    """
    now = now or datetime.now()
    upper = value.upper()

    if ":" in value and "AM" not in upper and "PM" not in upper:
        try:
            return _time_today(datetime.strptime(value, "%H:%M"), now)
        except ValueError:
            pass

    if upper.endswith(("AM", "PM")):
        try:
            return _time_today(datetime.strptime(upper, "%I:%M%p"), now)
        except ValueError:
            pass

    try:
        return datetime.strptime(f"{now.year}{value}", "%Y%b%d")
    except ValueError:
        pass

    if value.isdigit() and 2000 < int(value) < 2100:
        return datetime(int(value), 1, 1)

    return None


def format_terminal_name(name: str) -> str:
    return TERMINAL_LABELS.get(name, name.capitalize())


def terminal_from_command(command: str) -> str | None:
    """Match an ancestor's command against the known terminals.

    The executable basename is checked first, then any ``.app`` bundle in
    the path (e.g. ``/Applications/Warp.app/Contents/MacOS/stable``).
    """
    basename = PurePosixPath(command).name.lower()
    for terminal in KNOWN_TERMINALS:
        if terminal in basename:
            return format_terminal_name(terminal)

    for part in command.split("/"):
        if not part.endswith(".app"):
            continue
        app_name = part[: -len(".app")].lower()
        for terminal in KNOWN_TERMINALS:
            if terminal in app_name:
                return format_terminal_name(terminal)
    return None


def detect_terminal_app(pid: int, inspector: ProcessInspector) -> str:
    """Walk the parent chain of ``pid`` looking for a terminal emulator.

    Returns:
        Display label of the terminal, or "Unknown".
    """
    current = pid
    visited: set[int] = set()
    for _ in range(MAX_ANCESTOR_HOPS):
        if current in visited:
            break
        visited.add(current)

        parent = inspector.get_parent_process(current)
        if parent is None:
            break

        terminal = terminal_from_command(parent.command)
        if terminal:
            return terminal

        if parent.ppid <= 1 or parent.ppid == current:
            break
        current = parent.ppid

    return UNKNOWN_TERMINAL
