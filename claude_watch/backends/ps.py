"""ps/lsof process inspection backend.

Implements the ProcessInspector interface with the stock BSD/Linux
utilities: ``ps aux`` for the process table, ``ps -o ppid=,comm=`` for the
ancestor walk and ``lsof -d cwd`` for working directories.
"""

import logging
import subprocess

from claude_watch.backends.base import ParentProcess, ProcessDiscoveryError, ProcessInspector

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def _run_command(*args: str, timeout: int = DEFAULT_TIMEOUT) -> tuple[int, str, str]:
    """Run an inspection utility.

    Args:
        *args: Executable and arguments.
        timeout: Command timeout in seconds.

    Returns:
        Tuple of (return_code, stdout, stderr).
    """
    try:
        result = subprocess.run(
            list(args),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return (result.returncode, result.stdout or "", result.stderr or "")
    except subprocess.TimeoutExpired:
        return (1, "", "Command timed out")
    except FileNotFoundError:
        return (1, "", f"{args[0]} not found")
    except OSError as e:
        return (1, "", str(e))


class PsInspector(ProcessInspector):
    """Process inspector backed by ps and lsof."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        """Initialize the inspector.

        Args:
            timeout: Per-invocation timeout in seconds.
        """
        self.timeout = timeout

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "ps"

    def list_processes(self) -> str:
        """Return ``ps aux`` output.

        Raises:
            ProcessDiscoveryError: If ps could not be run or produced nothing.
        """
        returncode, stdout, stderr = _run_command("ps", "aux", timeout=self.timeout)
        if returncode != 0 and not stdout:
            raise ProcessDiscoveryError(stderr.strip() or f"ps exited with {returncode}")
        return stdout

    def get_parent_process(self, pid: int) -> ParentProcess | None:
        """Look up the parent of a process.

        Args:
            pid: Process to inspect.

        Returns:
            ParentProcess, or None if the process is gone or output is odd.
        """
        returncode, stdout, _ = _run_command(
            "ps", "-o", "ppid=,comm=", "-p", str(pid), timeout=self.timeout
        )
        if returncode != 0:
            return None

        # Format: "PPID COMMAND"
        parts = stdout.strip().split(None, 1)
        if len(parts) < 2:
            return None
        try:
            ppid = int(parts[0])
        except ValueError:
            return None
        return ParentProcess(ppid=ppid, command=parts[1])

    def get_working_directory(self, pid: int) -> str | None:
        """Resolve the cwd of a process through lsof.

        Args:
            pid: Process to inspect.

        Returns:
            Absolute path, or None if lsof failed.
        """
        _, stdout, _ = _run_command(
            "lsof", "-a", "-p", str(pid), "-d", "cwd", "-Fn", timeout=self.timeout
        )
        # Format: p<pid>\nf<fd>\nn<path>
        for line in stdout.splitlines():
            if line.startswith("n") and len(line) > 1:
                return line[1:]
        logger.debug(f"No cwd reported by lsof for pid {pid}")
        return None
