"""Sub-agent discovery from agent transcript files.

Agents live in two places under a project directory:
- ``<project>/<session>/subagents/agent-*`` (always belong to the session)
- ``<project>/agent-*.jsonl`` (belong to whichever session they record)
"""

import logging
import time
from pathlib import Path

from claude_watch.models.agent import AGENT_TYPE_ALIASES, Agent, AgentStatus, AgentType
from claude_watch.services.claude_paths import project_dir
from claude_watch.services.session_parser import message_content, parse_jsonl_line

logger = logging.getLogger(__name__)

AGENT_FILE_PREFIX = "agent-"
DEFAULT_RUNNING_THRESHOLD = 120
DEFAULT_PREFIX_BYTES = 8192

# Ordered (phrases, type) rules for sniffing an agent's role from its first
# assistant message. First match wins.
TYPE_HINTS: list[tuple[tuple[str, ...], AgentType]] = [
    (("read-only mode", "search and explore"), AgentType.EXPLORE),
    (("design implementation plans", "plan mode"), AgentType.PLAN),
    (("bash", "command execution"), AgentType.BASH),
    (("code review", "reviewing"), AgentType.CODE_REVIEW),
    (("general-purpose", "multi-step tasks"), AgentType.GENERAL),
]


# Longest first so "general-purpose" wins over "general".
FILENAME_TYPE_NAMES = sorted(AGENT_TYPE_ALIASES, key=len, reverse=True)


def split_agent_filename(stem: str) -> tuple[AgentType, str]:
    """Split ``agent-<type>-<id>`` or ``agent-a<type>-<id>`` into type and id.

    Type names may contain hyphens. Stems without a known type give
    UNKNOWN and the id after the first hyphen (or the whole name).
    """
    name = stem.removeprefix(AGENT_FILE_PREFIX)
    candidates = [name, name[1:]] if name.startswith("a") else [name]
    for candidate in candidates:
        for type_name in FILENAME_TYPE_NAMES:
            head = type_name + "-"
            if candidate.startswith(head) and len(candidate) > len(head):
                return AgentType.from_string(type_name), candidate[len(head):]
    _, sep, tail = name.partition("-")
    return AgentType.UNKNOWN, tail if sep and tail else name


def agent_type_from_filename(stem: str) -> AgentType:
    return split_agent_filename(stem)[0]


def agent_id_from_filename(stem: str) -> str:
    return split_agent_filename(stem)[1]


def infer_agent_type(text: str) -> AgentType:
    """Guess an agent's type from the wording of its first reply."""
    text = text.lower()
    for phrases, agent_type in TYPE_HINTS:
        if any(phrase in text for phrase in phrases):
            return agent_type
    return AgentType.UNKNOWN


def ended_turn(entry: dict) -> bool:
    """Whether a transcript entry closes its turn (``stop_reason: end_turn``)."""
    message = entry.get("message")
    return isinstance(message, dict) and message.get("stop_reason") == "end_turn"


class AgentScanner:
    """Finds and classifies the sub-agents of a session."""

    def __init__(
        self,
        projects_dir: Path,
        running_threshold: int = DEFAULT_RUNNING_THRESHOLD,
        prefix_bytes: int = DEFAULT_PREFIX_BYTES,
    ):
        self.projects_dir = Path(projects_dir)
        self.running_threshold = running_threshold
        self.prefix_bytes = prefix_bytes

    def scan_agents(self, session_id: str, project_path: str) -> list[Agent]:
        """List the agents of a session.

        Args:
            session_id: Parent session UUID.
            project_path: Working directory of the session's instance.

        Returns:
            Agents from the session's subagents directory followed by
            matching root-level agents. Unreadable files are skipped.
        """
        base = project_dir(self.projects_dir, project_path)
        agents = []

        subagents_dir = base / session_id / "subagents"
        for path in self._agent_files(subagents_dir, require_jsonl=False):
            agent = self._parse_agent_file(path, session_id)
            if agent is not None:
                agents.append(agent)

        for path in self._agent_files(base, require_jsonl=True):
            agent = self._parse_agent_file(path, session_id, require_session_match=True)
            if agent is not None:
                agents.append(agent)

        return agents

    @staticmethod
    def _agent_files(directory: Path, require_jsonl: bool) -> list[Path]:
        try:
            entries = sorted(directory.iterdir())
        except OSError:
            return []
        return [
            path
            for path in entries
            if path.name.startswith(AGENT_FILE_PREFIX)
            and path.is_file()
            and (not require_jsonl or path.suffix == ".jsonl")
        ]

    def _parse_agent_file(
        self, path: Path, session_id: str, require_session_match: bool = False
    ) -> Agent | None:
        try:
            with open(path, "rb") as f:
                data = f.read(self.prefix_bytes)
            mtime = path.stat().st_mtime
        except OSError as e:
            logger.debug(f"Cannot read agent file {path}: {e}")
            return None

        # The prefix cut can split the last line; it simply fails to parse.
        lines = [line for line in data.decode("utf-8", errors="replace").split("\n") if line]
        entries = [entry for entry in map(parse_jsonl_line, lines) if entry is not None]
        if not entries:
            return None

        first = entries[0]
        recorded_session = first.get("sessionId")
        if not isinstance(recorded_session, str) or not recorded_session:
            recorded_session = session_id
        if require_session_match and recorded_session != session_id:
            return None

        agent_id = first.get("agentId")
        if not isinstance(agent_id, str) or not agent_id:
            agent_id = agent_id_from_filename(path.stem)

        agent_type = agent_type_from_filename(path.stem)
        if agent_type == AgentType.UNKNOWN:
            agent_type = infer_agent_type(self._first_assistant_text(entries))

        slug = next(
            (e["slug"] for e in entries if isinstance(e.get("slug"), str) and e["slug"]), None
        )

        return Agent(
            id=agent_id,
            parent_session_id=session_id,
            type=agent_type,
            status=self._status(mtime, entries),
            slug=slug,
        )

    @staticmethod
    def _first_assistant_text(entries: list[dict]) -> str:
        for entry in entries:
            message = entry.get("message")
            is_assistant = entry.get("type") == "assistant" or (
                isinstance(message, dict) and message.get("role") == "assistant"
            )
            if not is_assistant:
                continue
            texts = [
                item["text"]
                for item in message_content(entry) or []
                if isinstance(item.get("text"), str)
            ]
            return " ".join(texts)
        return ""

    def _status(self, mtime: float, entries: list[dict]) -> AgentStatus:
        if time.time() - mtime < self.running_threshold:
            return AgentStatus.RUNNING
        if ended_turn(entries[-1]):
            return AgentStatus.COMPLETED
        # No failure signal exists in transcript content; quiet files without
        # an end_turn marker count as completed too.
        return AgentStatus.COMPLETED
