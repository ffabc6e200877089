"""Tests for the Monitor polling passes."""

import time
from datetime import datetime, timezone

import pytest
from helpers import PROJECT_PATH, SESSION_ID, FakeInspector, tool_use_entry, write_jsonl

from claude_watch.models.activity import ConflictSeverity
from claude_watch.models.config import AppConfig, PollingConfig
from claude_watch.services.event_bus import (
    ACTIVITY_UPDATED,
    CONFLICTS_UPDATED,
    INSTANCES_UPDATED,
    LOG_ENTRIES,
    EventBus,
)
from claude_watch.services.monitor import Monitor

PS_LINE = (
    "dev 4242 12.5 1.2 4000000 204800 s003 S+ 10:15AM 0:42.10 "
    f"claude --resume {SESSION_ID}\n"
)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def monitor(claude_dir, bus):
    inspector = FakeInspector(PS_LINE, cwds={4242: PROJECT_PATH})
    config = AppConfig(claude_dir=str(claude_dir))
    return Monitor(config=config, event_bus=bus, inspector=inspector)


def _stamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _event_types(bus):
    return [e.event_type for e in bus.get_buffered_events()]


class TestProcessPass:
    """Tests for process discovery publishing."""

    def test_publishes_instances(self, monitor, bus, project):
        subagents = project / SESSION_ID / "subagents"
        subagents.mkdir(parents=True)
        write_jsonl(subagents / "agent-aexplore-1.jsonl", [{"agentId": "1", "sessionId": SESSION_ID}])

        [instance] = monitor.poll_processes()

        assert instance.session_id == SESSION_ID
        assert [a.id for a in instance.agents] == ["1"]
        assert monitor.state.instances() == [instance]
        assert _event_types(bus) == [INSTANCES_UPDATED]

    def test_discovery_failure_keeps_previous_list(self, monitor, project):
        monitor.poll_processes()
        monitor.scanner.inspector.listing = None

        instances = monitor.poll_processes()

        assert [i.pid for i in instances] == [4242]


class TestActivityPass:
    """Tests for session activity processing."""

    def test_conflicting_writes_in_one_session(self, monitor, bus, project):
        monitor.poll_processes()
        now = datetime.now(timezone.utc)
        write_jsonl(
            project / f"{SESSION_ID}.jsonl",
            [
                tool_use_entry("Edit", {"file_path": "/src/app.py"}, timestamp=_stamp(now)),
                tool_use_entry(
                    "Write",
                    {"file_path": "/src/app.py"},
                    timestamp=_stamp(now),
                    agent_id="agent-7",
                    tool_id="toolu_2",
                ),
            ],
        )

        monitor.poll_activity(now=now)

        [conflict] = monitor.state.active_conflicts()
        assert conflict.severity == ConflictSeverity.CRITICAL
        assert len(monitor.state.recent_operations()) == 2

        snapshot = monitor.state.session_snapshot(SESSION_ID)
        assert "█" in snapshot["sparkline"]
        assert snapshot["current_action"] == "Write /src/app.py"
        assert snapshot["model"] == "OPUS 4.6"
        assert ACTIVITY_UPDATED in _event_types(bus)
        assert _event_types(bus)[-1] == CONFLICTS_UPDATED

    def test_lines_processed_once(self, monitor, project):
        monitor.poll_processes()
        write_jsonl(project / f"{SESSION_ID}.jsonl", [tool_use_entry("Read", {"file_path": "/a"})])

        monitor.poll_activity()
        monitor.poll_activity()

        assert len(monitor.state.recent_operations()) == 1

    def test_sessions_without_transcript(self, monitor, project):
        monitor.poll_processes()

        monitor.poll_activity()

        assert monitor.state.session_snapshot(SESSION_ID)["sparkline"] == "▁" * 20
        assert monitor.state.active_conflicts() == []

    def test_vanished_session_state_dropped(self, monitor, project):
        monitor.poll_processes()
        write_jsonl(project / f"{SESSION_ID}.jsonl", [tool_use_entry("Read", {"file_path": "/a"})])
        monitor.poll_activity()
        assert monitor.activity.recent_activity_count(SESSION_ID) == 1

        monitor.scanner.inspector.listing = ""
        monitor.poll_processes()
        monitor.poll_activity()

        assert monitor.activity.recent_activity_count(SESSION_ID) == 0
        assert monitor.state.session_snapshot(SESSION_ID)["sparkline"] is None
        assert SESSION_ID not in monitor.state.sparklines()


class TestLogPass:
    """Tests for debug-log publishing."""

    def test_new_entries_published(self, monitor, bus, debug_dir):
        log = debug_dir / f"{SESSION_ID}.txt"
        log.write_text("2026-01-29T21:16:26.939Z [INFO] history\n")
        assert monitor.poll_logs() == 0

        with open(log, "a") as f:
            f.write("2026-01-29T21:16:27.000Z [ERROR] Boom\n")

        assert monitor.poll_logs() == 1
        [entry] = monitor.state.log_entries()
        assert entry.message == "Boom"
        assert _event_types(bus) == [LOG_ENTRIES]


class TestLifecycle:
    """Tests for starting and stopping the loops."""

    def test_start_and_stop(self, claude_dir, bus):
        config = AppConfig(
            claude_dir=str(claude_dir),
            polling=PollingConfig(process_interval=0.1, activity_interval=0.1, log_interval=0.1),
        )
        monitor = Monitor(config=config, event_bus=bus, inspector=FakeInspector(""))

        monitor.start()
        assert monitor.is_running
        time.sleep(0.3)
        monitor.stop()

        assert not monitor.is_running
        assert INSTANCES_UPDATED in _event_types(bus)

    def test_pass_errors_do_not_kill_loop(self, claude_dir, bus):
        config = AppConfig(
            claude_dir=str(claude_dir),
            polling=PollingConfig(process_interval=0.1, activity_interval=0.1, log_interval=0.1),
        )
        monitor = Monitor(config=config, event_bus=bus, inspector=FakeInspector(""))
        calls = []

        def failing_pass():
            calls.append(1)
            raise RuntimeError("boom")

        monitor.poll_logs = failing_pass
        monitor.start()
        time.sleep(0.35)
        monitor.stop()

        assert len(calls) >= 2
