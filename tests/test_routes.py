"""Tests for the Flask API routes."""

from datetime import datetime, timezone

import pytest
from helpers import PROJECT_PATH, SESSION_ID, tool_use_entry, write_jsonl

from claude_watch.app import create_app
from claude_watch.models import (
    Agent,
    AgentType,
    AppConfig,
    ConflictSeverity,
    FileConflict,
    Instance,
    LogEntry,
    LogLevel,
    TokenUsage,
    ToolOperation,
    ToolType,
)

NOW = datetime.now(timezone.utc)


@pytest.fixture
def app(claude_dir):
    app = create_app(config=AppConfig(claude_dir=str(claude_dir)))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def state(app):
    return app.extensions["monitor_state"]


def _instance(pid=4242, wd=PROJECT_PATH, **kwargs):
    return Instance(pid=pid, working_directory=wd, start_time=datetime(2026, 1, 29, 10, 0), **kwargs)


class TestIndex:
    def test_index(self, client):
        data = client.get("/").get_json()

        assert data["name"] == "claude-watch"
        assert data["version"]


class TestInstanceRoutes:
    """Tests for /api/instances and /api/status."""

    def test_empty(self, client):
        assert client.get("/api/instances").get_json() == {"instances": []}

    def test_list_instances(self, client, state):
        agent = Agent(id="a1", parent_session_id=SESSION_ID, type=AgentType.EXPLORE)
        state.update_instances(
            [
                _instance(
                    session_id=SESSION_ID,
                    arguments=["claude", "--dangerously-skip-permissions", "--resume", SESSION_ID],
                    agents=[agent],
                )
            ]
        )

        [data] = client.get("/api/instances").get_json()["instances"]

        assert data["pid"] == 4242
        assert data["display_name"] == "my.app"
        assert data["display_flags"] == ["resume"]
        assert data["is_dangerous_mode"] is True
        assert data["agents"][0]["display_name"] == "Explore"
        assert data["agents"][0]["status"] == "running"

    def test_groups(self, client, state):
        state.update_instances([_instance(1, is_active=True), _instance(2, is_active=False)])

        [group] = client.get("/api/instances/groups").get_json()["groups"]

        assert group["active_count"] == 1
        assert [i["pid"] for i in group["instances"]] == [1, 2]

    def test_get_instance(self, client, state):
        state.update_instances([_instance()])

        assert client.get("/api/instances/4242").get_json()["pid"] == 4242
        assert client.get("/api/instances/1").status_code == 404

    def test_status(self, client, state):
        state.update_instances([_instance(1, is_active=True), _instance(2, is_active=False)])
        state.update_conflicts(
            [FileConflict(file_path="/a", severity=ConflictSeverity.CRITICAL, detected_at=NOW)]
        )

        data = client.get("/api/status").get_json()

        assert data == {
            "status": "active",
            "instance_count": 2,
            "active_count": 1,
            "conflict_count": 1,
            "critical_conflict_count": 1,
        }

    def test_status_idle(self, client):
        assert client.get("/api/status").get_json()["status"] == "idle"


class TestActivityRoutes:
    """Tests for /api/conflicts and /api/operations."""

    def test_conflicts(self, client, state):
        op = ToolOperation(timestamp=NOW, session_id="s", tool=ToolType.WRITE, file_path="/src/a.py")
        state.update_conflicts(
            [
                FileConflict(
                    file_path="/src/a.py",
                    operations=(op,),
                    severity=ConflictSeverity.WARNING,
                    detected_at=NOW,
                )
            ]
        )

        data = client.get("/api/conflicts").get_json()

        assert data["warning_count"] == 1
        assert data["critical_count"] == 0
        assert data["conflicts"][0]["file_name"] == "a.py"
        assert data["conflicts"][0]["operations"][0]["label"] == "Write"

    def test_operations_filtered_by_session(self, client, state):
        state.add_operations(
            [
                ToolOperation(timestamp=NOW, session_id="s1", tool=ToolType.READ, file_path="/a"),
                ToolOperation(timestamp=NOW, session_id="s2", tool=ToolType.BASH),
            ]
        )

        data = client.get("/api/operations?session_id=s2").get_json()

        assert [op["tool"] for op in data["operations"]] == ["bash"]


class TestLogRoutes:
    """Tests for /api/logs."""

    @pytest.fixture(autouse=True)
    def entries(self, state):
        state.add_log_entries(
            [
                LogEntry(timestamp=NOW, level=LogLevel.INFO, message="Loading config"),
                LogEntry(timestamp=NOW, level=LogLevel.ERROR, message="Config failed"),
                LogEntry(timestamp=NOW, level=LogLevel.DEBUG, message="tick"),
            ]
        )

    def test_all(self, client):
        data = client.get("/api/logs").get_json()

        assert data["total"] == 3
        assert [e["message"] for e in data["entries"]] == ["Loading config", "Config failed", "tick"]

    def test_filters(self, client):
        data = client.get("/api/logs?level=error&q=CONFIG").get_json()

        assert [e["level"] for e in data["entries"]] == ["ERROR"]

    def test_limit_keeps_newest(self, client):
        data = client.get("/api/logs?limit=1").get_json()

        assert [e["message"] for e in data["entries"]] == ["tick"]
        assert data["total"] == 3

    @pytest.mark.parametrize("query", ["level=WARN", "limit=many"])
    def test_bad_params(self, client, query):
        assert client.get(f"/api/logs?{query}").status_code == 400


class TestSessionRoutes:
    """Tests for /api/sessions."""

    def test_snapshot(self, client, state):
        state.update_instances([_instance(session_id=SESSION_ID)])
        state.update_sparkline(SESSION_ID, "▁▂█")
        state.update_session_live_data(
            SESSION_ID,
            action="Read /a",
            model="OPUS 4.6",
            tokens=TokenUsage(input_tokens=1000, output_tokens=500),
        )

        data = client.get(f"/api/sessions/{SESSION_ID}").get_json()

        assert data["sparkline"] == "▁▂█"
        assert data["current_action"] == "Read /a"
        assert data["tokens"]["total_input"] == 1000
        assert data["instance"]["pid"] == 4242

    def test_unknown_session(self, client):
        data = client.get("/api/sessions/nope").get_json()

        assert data["instance"] is None
        assert data["tokens"] is None

    def test_turns(self, client, state, project):
        state.update_instances([_instance(session_id=SESSION_ID)])
        write_jsonl(
            project / f"{SESSION_ID}.jsonl",
            [tool_use_entry("Read", {"file_path": "/src/a.py"})],
        )

        data = client.get(f"/api/sessions/{SESSION_ID}/turns").get_json()

        assert data["total"] == 1
        assert data["turns"][0]["display_model"] == "OPUS 4.6"
        assert data["turns"][0]["tool_calls"][0]["name"] == "Read"

    def test_turns_without_instance(self, client):
        assert client.get(f"/api/sessions/{SESSION_ID}/turns").status_code == 404


class TestConfigRoute:
    def test_config(self, client, claude_dir):
        data = client.get("/api/config").get_json()

        assert data["claude_dir"] == str(claude_dir)
        assert data["debug_dir"] == str(claude_dir / "debug")
        assert data["config_path"] == "config.yaml"
        assert data["conflicts"]["window_seconds"] == 5.0


class TestEventsRoute:
    def test_event_stream(self, app):
        app.extensions["event_bus"].emit("instances_updated", {"instances": []})

        response = app.test_client().get("/api/events")
        first = next(response.iter_encoded())
        response.close()

        assert response.status_code == 200
        assert response.mimetype == "text/event-stream"
        assert first.startswith(b"event: instances_updated")

    def test_event_stream_without_replay(self, app):
        app.extensions["event_bus"].emit("instances_updated", {"instances": []})
        stream = app.extensions["event_bus"].get_sse_stream

        def quick_stream(include_buffer=True):
            return stream(include_buffer=include_buffer, timeout=0.05)

        app.extensions["event_bus"].get_sse_stream = quick_stream
        response = app.test_client().get("/api/events?replay=0")
        first = next(response.iter_encoded())
        response.close()

        assert first == b": keep-alive\n\n"
