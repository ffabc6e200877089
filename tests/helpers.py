"""Builders for fake transcript and log files used across tests."""

import json
import os
import time
from pathlib import Path

from claude_watch.backends.base import ProcessDiscoveryError, ProcessInspector

SESSION_ID = "11111111-2222-3333-4444-555555555555"
OTHER_SESSION_ID = "66666666-7777-8888-9999-000000000000"
PROJECT_PATH = "/Users/dev/my.app"


def write_jsonl(path: Path, entries: list[dict], mode: str = "w") -> None:
    with open(path, mode) as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")


def set_mtime(path: Path, age_seconds: float) -> None:
    """Backdate a file's modification time."""
    stamp = time.time() - age_seconds
    os.utime(path, (stamp, stamp))


def tool_use_entry(
    name: str,
    tool_input: dict,
    timestamp: str = "2026-01-29T21:16:26.939Z",
    agent_id: str | None = None,
    tool_id: str = "toolu_1",
) -> dict:
    entry = {
        "type": "assistant",
        "uuid": f"uuid-{tool_id}",
        "timestamp": timestamp,
        "message": {
            "role": "assistant",
            "model": "claude-opus-4-6-20251101",
            "content": [{"type": "tool_use", "id": tool_id, "name": name, "input": tool_input}],
        },
    }
    if agent_id:
        entry["agentId"] = agent_id
    return entry


class FakeInspector(ProcessInspector):
    """In-memory process table."""

    def __init__(self, listing="", parents=None, cwds=None):
        self.listing = listing
        self.parents = parents or {}
        self.cwds = cwds or {}

    @property
    def backend_name(self) -> str:
        return "fake"

    def list_processes(self) -> str:
        if self.listing is None:
            raise ProcessDiscoveryError("ps not found")
        return self.listing

    def get_parent_process(self, pid):
        return self.parents.get(pid)

    def get_working_directory(self, pid):
        return self.cwds.get(pid)
