"""Process discovery: turns the OS process table into Instances."""

import logging
from datetime import datetime
from pathlib import Path

from claude_watch.backends.base import ProcessInspector
from claude_watch.models.instance import Instance
from claude_watch.services.process_parser import ProcessRecord, detect_terminal_app, parse_ps_output
from claude_watch.services.session_resolver import SessionResolver

logger = logging.getLogger(__name__)

DEFAULT_ACTIVE_CPU_THRESHOLD = 5.0


class ProcessScanner:
    """Discovers running CLI processes and correlates their sessions."""

    def __init__(
        self,
        inspector: ProcessInspector,
        resolver: SessionResolver,
        active_cpu_threshold: float = DEFAULT_ACTIVE_CPU_THRESHOLD,
    ):
        self.inspector = inspector
        self.resolver = resolver
        self.active_cpu_threshold = active_cpu_threshold

    def scan(self, now: datetime | None = None) -> list[Instance]:
        """List the CLI instances currently running.

        Per-process lookups that fail degrade to defaults (home directory,
        no session, unknown terminal) instead of dropping the instance.

        Raises:
            ProcessDiscoveryError: If the process table cannot be listed.
        """
        output = self.inspector.list_processes()
        instances = []
        for record in parse_ps_output(output, now=now):
            try:
                instances.append(self._build_instance(record))
            except Exception as e:
                logger.warning(f"Skipping pid {record.pid}: {e}")
        return instances

    def _build_instance(self, record: ProcessRecord) -> Instance:
        working_directory = self.inspector.get_working_directory(record.pid) or str(Path.home())
        session_id = self.resolver.resolve(record.arguments, working_directory)
        return Instance(
            pid=record.pid,
            working_directory=working_directory,
            session_id=session_id,
            start_time=record.start_time,
            arguments=record.arguments,
            is_active=record.cpu_percent > self.active_cpu_threshold,
            terminal_app=detect_terminal_app(record.pid, self.inspector),
            cpu_percent=record.cpu_percent,
            memory_mb=record.memory_mb,
            tty=record.tty,
        )
