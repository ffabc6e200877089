"""Services for claude-watch."""

from claude_watch.services.activity_tracker import ActivityTracker
from claude_watch.services.agent_scanner import AgentScanner
from claude_watch.services.config_service import (
    ConfigService,
    get_config_service,
    reset_config_service,
)
from claude_watch.services.conflict_detector import ConflictDetector
from claude_watch.services.event_bus import Event, EventBus, get_event_bus, reset_event_bus
from claude_watch.services.file_tracker import FileTracker
from claude_watch.services.log_parser import LogParser
from claude_watch.services.log_tailer import LogTailer
from claude_watch.services.monitor import Monitor
from claude_watch.services.monitor_state import MonitorState, MonitorStatus
from claude_watch.services.process_scanner import ProcessScanner
from claude_watch.services.session_parser import LiveData, SessionParser, extract_live_data
from claude_watch.services.session_resolver import SessionResolver
from claude_watch.services.tool_operation_parser import ToolOperationParser

__all__ = [
    # Activity tracker
    "ActivityTracker",
    # Agent scanner
    "AgentScanner",
    # Config service
    "ConfigService",
    "get_config_service",
    "reset_config_service",
    # Conflict detector
    "ConflictDetector",
    # Event bus
    "Event",
    "EventBus",
    "get_event_bus",
    "reset_event_bus",
    # Tailing
    "FileTracker",
    "LogParser",
    "LogTailer",
    # Monitor
    "Monitor",
    "MonitorState",
    "MonitorStatus",
    # Discovery
    "ProcessScanner",
    "SessionResolver",
    # Transcript parsing
    "LiveData",
    "SessionParser",
    "ToolOperationParser",
    "extract_live_data",
]
