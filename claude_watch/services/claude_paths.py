"""Locations of the CLI's on-disk data.

Claude Code keeps per-project transcripts in
``<claude_dir>/projects/<encoded-path>/`` where the encoded path is the
working directory with ``/`` and ``.`` replaced by ``-``, and per-session
debug logs in ``<claude_dir>/debug/<session-uuid>.txt``.
"""

import json
import logging
import uuid
from pathlib import Path

from pydantic import ValidationError

from claude_watch.models.activity import SessionsIndexFile

logger = logging.getLogger(__name__)

SESSIONS_INDEX_FILENAME = "sessions-index.json"


def encode_project_path(project_path: str) -> str:
    """Encode a working directory the way the CLI names project directories.

    Args:
        project_path: Absolute path (e.g., /Users/sam/my.app)

    Returns:
        Encoded name (e.g., -Users-sam-my-app)
    """
    return project_path.replace("/", "-").replace(".", "-")


def project_dir(projects_dir: Path, project_path: str) -> Path:
    """Directory holding transcripts for a working directory."""
    return projects_dir / encode_project_path(project_path)


def session_file_path(projects_dir: Path, project_path: str, session_id: str) -> Path:
    """Path of a session's JSONL transcript."""
    return project_dir(projects_dir, project_path) / f"{session_id}.jsonl"


def is_uuid(value: str) -> bool:
    """Check whether a string is a well-formed UUID."""
    try:
        uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True


def load_sessions_index(index_path: Path) -> SessionsIndexFile | None:
    """Read and validate a sessions-index.json file.

    Returns:
        The parsed index, or None if the file is missing or malformed.
    """
    try:
        raw = json.loads(index_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.debug(f"Unreadable sessions index {index_path}: {e}")
        return None

    try:
        return SessionsIndexFile.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"Invalid sessions index {index_path}: {e}")
        return None
