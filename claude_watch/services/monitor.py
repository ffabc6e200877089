"""Monitor: the polling loops that keep MonitorState current.

Three daemon threads run independently:
- process discovery (ps/lsof, session correlation, agent scan)
- session activity (transcript tailing, conflicts, sparklines, live data)
- debug-log tailing

Each pass publishes to MonitorState and emits an EventBus event.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from claude_watch.backends.base import ProcessDiscoveryError, ProcessInspector
from claude_watch.backends.ps import PsInspector
from claude_watch.models.config import AppConfig
from claude_watch.models.instance import Instance
from claude_watch.services.activity_tracker import ActivityTracker
from claude_watch.services.agent_scanner import AgentScanner
from claude_watch.services.claude_paths import session_file_path
from claude_watch.services.conflict_detector import ConflictDetector
from claude_watch.services.event_bus import (
    ACTIVITY_UPDATED,
    CONFLICTS_UPDATED,
    INSTANCES_UPDATED,
    LOG_ENTRIES,
    EventBus,
    get_event_bus,
)
from claude_watch.services.file_tracker import FileTracker
from claude_watch.services.log_tailer import LogTailer
from claude_watch.services.monitor_state import MonitorState
from claude_watch.services.process_scanner import ProcessScanner
from claude_watch.services.serializers import (
    conflict_to_dict,
    instance_to_dict,
    log_entry_to_dict,
    operation_to_dict,
)
from claude_watch.services.session_parser import extract_live_data
from claude_watch.services.session_resolver import SessionResolver
from claude_watch.services.tool_operation_parser import ToolOperationParser

logger = logging.getLogger(__name__)


class Monitor:
    """Wires the trackers together and drives them from background threads."""

    def __init__(
        self,
        config: AppConfig | None = None,
        state: MonitorState | None = None,
        event_bus: EventBus | None = None,
        inspector: ProcessInspector | None = None,
    ):
        """Initialize the monitor.

        Args:
            config: Application configuration (defaults if omitted).
            state: Store to publish into.
            event_bus: Bus for update events (global bus if omitted).
            inspector: Process inspection backend (ps/lsof if omitted).
        """
        self.config = config or AppConfig()
        self.state = state or MonitorState(
            max_log_entries=self.config.max_log_entries,
            max_recent_operations=self.config.max_recent_operations,
        )
        self.event_bus = event_bus or get_event_bus()

        projects_dir = self.config.projects_dir
        self.session_tracker = FileTracker(
            projects_dir=projects_dir, index_ttl=self.config.session_index_ttl
        )
        self.resolver = SessionResolver(
            debug_dir=self.config.debug_dir,
            projects_dir=projects_dir,
            file_tracker=self.session_tracker,
            recency_seconds=self.config.discovery.debug_log_recency_seconds,
        )
        self.scanner = ProcessScanner(
            inspector=inspector or PsInspector(timeout=self.config.discovery.command_timeout),
            resolver=self.resolver,
            active_cpu_threshold=self.config.discovery.active_cpu_threshold,
        )
        self.agent_scanner = AgentScanner(
            projects_dir=projects_dir,
            running_threshold=self.config.agents.running_threshold_seconds,
            prefix_bytes=self.config.agents.prefix_bytes,
        )
        self.log_tailer = LogTailer(self.config.debug_dir)
        self.tool_parser = ToolOperationParser()
        self.conflicts = ConflictDetector(
            window_seconds=self.config.conflicts.window_seconds,
            expiry_seconds=self.config.conflicts.expiry_seconds,
        )
        self.activity = ActivityTracker(history_seconds=self.config.activity.history_seconds)
        self._tracked_sessions: set[str] = set()

        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []

    # Passes

    def poll_processes(self) -> list[Instance]:
        """Discover instances, attach their agents and publish them.

        A failed ps invocation leaves the previous instance list in place.
        """
        try:
            discovered = self.scanner.scan()
        except ProcessDiscoveryError as e:
            logger.warning(f"Process discovery failed: {e}")
            return self.state.instances()

        instances = []
        for instance in discovered:
            if instance.session_id:
                agents = self.agent_scanner.scan_agents(
                    instance.session_id, instance.working_directory
                )
                instance = instance.model_copy(update={"agents": agents})
            instances.append(instance)

        published = self.state.update_instances(instances)
        self.event_bus.emit(
            INSTANCES_UPDATED, {"instances": [instance_to_dict(i) for i in published]}
        )
        return published

    def poll_activity(self, now: datetime | None = None) -> None:
        """Tail each session transcript once and update derived state.

        Operations are fed to the conflict detector in file order before the
        session's sparkline is rendered. Once all sessions are done, buckets
        and live data of sessions no longer observed are dropped and expired
        conflicts are pruned.
        """
        seen_sessions = set()
        for instance in self.state.instances():
            session_id = instance.session_id
            if not session_id or session_id in seen_sessions:
                continue
            seen_sessions.add(session_id)

            path = session_file_path(
                self.config.projects_dir, instance.working_directory, session_id
            )
            new_lines = self.session_tracker.read_new_lines(path)

            operations = []
            for line in new_lines:
                ops = self.tool_parser.parse(line, session_id)
                for op in ops:
                    self.conflicts.record(op, now=now)
                if ops:
                    self.activity.record(session_id, len(ops))
                operations.extend(ops)

            if operations:
                self.state.add_operations(operations)

            sparkline = self.activity.sparkline(session_id)
            live = extract_live_data(new_lines)
            self.state.update_sparkline(session_id, sparkline)
            self.state.update_session_live_data(
                session_id, action=live.action, model=live.model, tokens=live.tokens
            )

            if operations or live.action:
                self.event_bus.emit(
                    ACTIVITY_UPDATED,
                    {
                        "session_id": session_id,
                        "sparkline": sparkline,
                        "current_action": live.action,
                        "operations": [operation_to_dict(op) for op in operations],
                    },
                )

        for session_id in self._tracked_sessions - seen_sessions:
            self.activity.forget(session_id)
            self.state.forget_session(session_id)
        self._tracked_sessions = seen_sessions

        self.conflicts.prune_expired(now=now)
        active = self.conflicts.active_conflicts()
        self.state.update_conflicts(active)
        warnings, critical = self.conflicts.conflict_summary()
        self.event_bus.emit(
            CONFLICTS_UPDATED,
            {
                "conflicts": [conflict_to_dict(c) for c in active],
                "warning_count": warnings,
                "critical_count": critical,
            },
        )

    def poll_logs(self) -> int:
        """Publish newly appended debug-log entries.

        Returns:
            Number of entries added.
        """
        entries = self.log_tailer.poll()
        if entries:
            self.state.add_log_entries(entries)
            self.event_bus.emit(LOG_ENTRIES, {"entries": [log_entry_to_dict(e) for e in entries]})
        return len(entries)

    # Lifecycle

    def start(self) -> None:
        """Start the polling threads."""
        if self._threads:
            return
        self._stop_event.clear()
        polling = self.config.polling
        loops = [
            ("process-discovery", polling.process_interval, self.poll_processes),
            ("session-activity", polling.activity_interval, self.poll_activity),
            ("debug-log-tail", polling.log_interval, self.poll_logs),
        ]
        for name, interval, poll in loops:
            thread = threading.Thread(
                target=self._run_loop, args=(name, interval, poll), name=name, daemon=True
            )
            thread.start()
            self._threads.append(thread)
        logger.info(
            f"Monitor started (processes {polling.process_interval}s, "
            f"activity {polling.activity_interval}s, logs {polling.log_interval}s)"
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the loops to exit and wait for them."""
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads = []
        self.log_tailer.close()
        logger.info("Monitor stopped")

    @property
    def is_running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def _run_loop(self, name: str, interval: float, poll: Callable[[], object]) -> None:
        while not self._stop_event.is_set():
            try:
                poll()
            except Exception as e:
                logger.error(f"{name} pass failed: {e}")
            self._stop_event.wait(interval)
