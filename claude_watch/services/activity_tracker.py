"""Per-session activity buckets and sparkline rendering."""

import threading
import time
from collections.abc import Callable

SPARKLINE_GLYPHS = "▁▂▃▄▅▆▇█"
SPARKLINE_WIDTH = 20
DEFAULT_HISTORY_SECONDS = 20

# Lower bound for the quantization scale; an all-zero window renders flat.
SPARKLINE_SCALE_FLOOR = 1


class ActivityTracker:
    """Counts extracted operations per session per wall-clock second.

    Only the trailing ``history_seconds`` of buckets are kept; pruning runs
    on every record.
    """

    def __init__(
        self,
        history_seconds: int = DEFAULT_HISTORY_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the tracker.

        Args:
            history_seconds: Seconds of buckets kept per session.
            clock: Wall clock returning epoch seconds.
        """
        self.history_seconds = history_seconds
        self._clock = clock
        self._buckets: dict[str, dict[int, int]] = {}
        self._lock = threading.Lock()

    def _now_second(self) -> int:
        return int(self._clock())

    def record(self, session_id: str, count: int = 1) -> None:
        """Add ``count`` events to the current second of a session."""
        now = self._now_second()
        cutoff = now - self.history_seconds
        with self._lock:
            buckets = self._buckets.setdefault(session_id, {})
            buckets[now] = buckets.get(now, 0) + count
            for second in [s for s in buckets if s < cutoff]:
                del buckets[second]

    def sparkline_data(self, session_id: str) -> list[int]:
        """Counts for the last SPARKLINE_WIDTH seconds, oldest first.

        Seconds beyond the retention horizon count as zero.
        """
        now = self._now_second()
        with self._lock:
            buckets = dict(self._buckets.get(session_id, {}))
        return [
            buckets.get(now - ago, 0) if ago < self.history_seconds else 0
            for ago in reversed(range(SPARKLINE_WIDTH))
        ]

    def sparkline(self, session_id: str) -> str:
        """Render recent activity as a fixed-width string of level glyphs.

        Each value is scaled against the window's own peak, so the busiest
        second always renders as the top glyph.
        """
        data = self.sparkline_data(session_id)
        scale = max(max(data, default=0), SPARKLINE_SCALE_FLOOR)
        top = len(SPARKLINE_GLYPHS) - 1
        return "".join(
            SPARKLINE_GLYPHS[0 if value == 0 else min(top, value * top // scale)]
            for value in data
        )

    def recent_activity_count(self, session_id: str, seconds: int = 5) -> int:
        """Total events over the last ``seconds`` seconds."""
        now = self._now_second()
        with self._lock:
            buckets = self._buckets.get(session_id, {})
            return sum(buckets.get(now - ago, 0) for ago in range(seconds))

    def forget(self, session_id: str) -> None:
        """Drop all buckets for a session that is no longer observed."""
        with self._lock:
            self._buckets.pop(session_id, None)

    def clear_all(self) -> None:
        with self._lock:
            self._buckets.clear()
