"""Access to the shared MonitorState from request handlers."""

import logging

from flask import current_app

from claude_watch.services.monitor_state import MonitorState

logger = logging.getLogger(__name__)


def get_state() -> MonitorState:
    """Get the monitor state from app extensions."""
    state = current_app.extensions.get("monitor_state")
    if state is None:
        logger.warning("MonitorState not in extensions, serving empty state")
        state = MonitorState()
        current_app.extensions["monitor_state"] = state
    return state
