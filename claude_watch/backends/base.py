"""Abstract base class for process inspection backends.

Defines the interface for the OS utilities process discovery relies on.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class ProcessDiscoveryError(Exception):
    """The process listing utility could not be invoked."""


@dataclass
class ParentProcess:
    """Parent link of a process, used to walk the ancestor chain."""

    ppid: int
    command: str  # Executable path or name as reported by ps


class ProcessInspector(ABC):
    """Abstract interface for process inspection.

    Process inspectors provide the ability to:
    - List every process in the OS process table
    - Look up a process's parent
    - Resolve a process's current working directory
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier (e.g., 'ps')."""

    @abstractmethod
    def list_processes(self) -> str:
        """Return the full tabular process listing.

        Raises:
            ProcessDiscoveryError: If the listing utility cannot be run.
        """

    @abstractmethod
    def get_parent_process(self, pid: int) -> ParentProcess | None:
        """Return the parent pid and command of ``pid``, or None on failure."""

    @abstractmethod
    def get_working_directory(self, pid: int) -> str | None:
        """Return the current working directory of ``pid``, or None on failure."""
