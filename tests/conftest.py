"""Pytest configuration and shared fixtures for claude-watch tests."""

import pytest
from helpers import PROJECT_PATH

from claude_watch.services.claude_paths import project_dir
from claude_watch.services.config_service import reset_config_service
from claude_watch.services.event_bus import reset_event_bus


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module singletons before and after each test."""
    reset_config_service()
    reset_event_bus()
    yield
    reset_config_service()
    reset_event_bus()


@pytest.fixture
def claude_dir(tmp_path):
    """A fake ~/.claude with empty debug/ and projects/ directories."""
    root = tmp_path / "claude"
    (root / "debug").mkdir(parents=True)
    (root / "projects").mkdir()
    return root


@pytest.fixture
def projects_dir(claude_dir):
    return claude_dir / "projects"


@pytest.fixture
def debug_dir(claude_dir):
    return claude_dir / "debug"


@pytest.fixture
def project(projects_dir):
    """Transcript directory for PROJECT_PATH."""
    path = project_dir(projects_dir, PROJECT_PATH)
    path.mkdir(parents=True)
    return path
