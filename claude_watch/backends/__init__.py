"""Process inspection backends."""

from claude_watch.backends.base import ParentProcess, ProcessDiscoveryError, ProcessInspector
from claude_watch.backends.ps import PsInspector

__all__ = [
    "ParentProcess",
    "ProcessDiscoveryError",
    "ProcessInspector",
    "PsInspector",
]
