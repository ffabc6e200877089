"""Agent model - a sub-task spawned within a Claude Code session."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class AgentType(str, Enum):
    """Classified sub-agent type."""

    EXPLORE = "explore"
    PLAN = "plan"
    BASH = "bash"
    GENERAL = "general"
    CODE_REVIEW = "code-review"
    COMPACT = "compact"
    PROMPT_SUGGESTION = "prompt-suggestion"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "AgentType":
        """Parse the loose type names found in filenames and tool inputs.

        Unrecognised names map to UNKNOWN rather than raising.
        """
        if not value:
            return cls.UNKNOWN
        return AGENT_TYPE_ALIASES.get(value.strip().lower(), cls.UNKNOWN)

    @property
    def display_name(self) -> str:
        return self.value.replace("-", " ").title()


AGENT_TYPE_ALIASES: dict[str, AgentType] = {
    "explore": AgentType.EXPLORE,
    "plan": AgentType.PLAN,
    "bash": AgentType.BASH,
    "general": AgentType.GENERAL,
    "general-purpose": AgentType.GENERAL,
    "codereview": AgentType.CODE_REVIEW,
    "code_review": AgentType.CODE_REVIEW,
    "code-review": AgentType.CODE_REVIEW,
    "compact": AgentType.COMPACT,
    "prompt_suggestion": AgentType.PROMPT_SUGGESTION,
    "promptsuggestion": AgentType.PROMPT_SUGGESTION,
    "prompt-suggestion": AgentType.PROMPT_SUGGESTION,
}


class AgentStatus(str, Enum):
    """Lifecycle status of a sub-agent.

    Only RUNNING and COMPLETED are inferred from transcript files; FAILED
    and CANCELLED exist for consumers that learn about them elsewhere.
    """

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Agent(BaseModel):
    """A sub-agent discovered from its own transcript file."""

    model_config = ConfigDict(frozen=True)

    id: str
    parent_session_id: str
    type: AgentType = AgentType.UNKNOWN
    status: AgentStatus = AgentStatus.RUNNING
    slug: str | None = None
