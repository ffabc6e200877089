"""Fan-out of monitor updates to in-process listeners and SSE clients.

The polling loops publish four kinds of update:

- instances_updated: after each process discovery pass
- activity_updated: when a session produced operations or a new action
- conflicts_updated: after each session activity pass
- log_entries: when new debug-log lines were parsed
"""

import json
import logging
import queue
import threading
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

INSTANCES_UPDATED = "instances_updated"
ACTIVITY_UPDATED = "activity_updated"
CONFLICTS_UPDATED = "conflicts_updated"
LOG_ENTRIES = "log_entries"

WILDCARD = "*"
KEEP_ALIVE = ": keep-alive\n\n"

Listener = Callable[["Event"], None]


@dataclass
class Event:
    """One published update. ``id`` is the bus sequence number."""

    event_type: str
    data: dict
    id: int | None = None
    published_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_sse(self) -> str:
        payload = json.dumps(self.data, default=str)
        message = f"event: {self.event_type}\ndata: {payload}\n"
        if self.id is not None:
            message += f"id: {self.id}\n"
        return message + "\n"


class EventBus:
    """Publishes monitor updates.

    Listeners registered with subscribe() run on the publishing thread.
    Each SSE client owns a bounded queue; a client that falls behind by a
    full queue is disconnected. The last ``buffer_size`` events are kept so
    a new client starts with current state.
    """

    def __init__(self, buffer_size: int = 100, queue_size: int = 100):
        """Initialize the bus.

        Args:
            buffer_size: Recent events replayed to new SSE clients.
            queue_size: Backlog allowed per SSE client.
        """
        self.queue_size = queue_size
        self._recent: deque[Event] = deque(maxlen=buffer_size)
        self._listeners: dict[str, list[Listener]] = {}
        self._clients: list[queue.Queue] = []
        self._sequence = 0
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, listener: Listener) -> None:
        """Call ``listener`` for every event of a type ("*" for all)."""
        with self._lock:
            self._listeners.setdefault(event_type, []).append(listener)

    def unsubscribe(self, event_type: str, listener: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(event_type, [])
            if listener in listeners:
                listeners.remove(listener)

    def emit(self, event_type: str, data: dict) -> Event:
        """Publish an update.

        Listeners run after the bus lock is released; a failing listener is
        logged and the rest still run.

        Returns:
            The published Event.
        """
        with self._lock:
            self._sequence += 1
            event = Event(event_type=event_type, data=data, id=self._sequence)
            self._recent.append(event)
            listeners = self._listeners.get(event_type, []) + self._listeners.get(WILDCARD, [])
            self._clients = [client for client in self._clients if self._offer(client, event)]

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Listener for {event_type} failed: {e}")
        return event

    @staticmethod
    def _offer(client: queue.Queue, event: Event) -> bool:
        try:
            client.put_nowait(event)
        except queue.Full:
            logger.info("Disconnecting SSE client with a full backlog")
            return False
        return True

    def get_sse_stream(self, include_buffer: bool = True, timeout: float = 30.0) -> Iterator[str]:
        """Stream events as SSE messages for a Flask streaming response.

        Args:
            include_buffer: Start with the recent-events buffer.
            timeout: Seconds without events before a keep-alive comment.
        """
        client: queue.Queue = queue.Queue(maxsize=self.queue_size)
        with self._lock:
            self._clients.append(client)
            backlog = list(self._recent) if include_buffer else []

        try:
            for event in backlog:
                yield event.to_sse()
            while True:
                try:
                    yield client.get(timeout=timeout).to_sse()
                except queue.Empty:
                    yield KEEP_ALIVE
        finally:
            with self._lock:
                if client in self._clients:
                    self._clients.remove(client)

    def get_buffered_events(
        self, since_id: int | None = None, event_type: str | None = None
    ) -> list[Event]:
        """Recent events newer than ``since_id``, optionally of one type."""
        with self._lock:
            events = list(self._recent)
        return [
            event
            for event in events
            if (since_id is None or event.id > since_id)
            and (event_type is None or event.event_type == event_type)
        ]

    def clear_buffer(self) -> None:
        with self._lock:
            self._recent.clear()

    @property
    def subscriber_count(self) -> int:
        """Connected SSE clients."""
        with self._lock:
            return len(self._clients)


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Process-wide bus shared by the monitor and the routes."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    global _event_bus
    _event_bus = None
