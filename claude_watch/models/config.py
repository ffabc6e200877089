"""Application configuration models with Pydantic validation."""

from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class PollingConfig(BaseModel):
    """Intervals of the three polling loops."""

    process_interval: float = Field(
        default=2.0,
        ge=0.1,
        le=60,
        description="Seconds between process discovery scans",
    )
    activity_interval: float = Field(
        default=2.0,
        ge=0.1,
        le=60,
        description="Seconds between session transcript passes",
    )
    log_interval: float = Field(
        default=0.5,
        ge=0.1,
        le=60,
        description="Seconds between debug-log tail passes",
    )


class DiscoveryConfig(BaseModel):
    """Process discovery and session correlation settings."""

    active_cpu_threshold: float = Field(
        default=5.0,
        ge=0,
        le=100,
        description="CPU percent above which an instance counts as active",
    )
    debug_log_recency_seconds: int = Field(
        default=120,
        ge=1,
        le=3600,
        description="Only debug logs modified this recently identify a live session",
    )
    command_timeout: int = Field(
        default=10,
        ge=1,
        le=120,
        description="Timeout in seconds for ps/lsof invocations",
    )


class ConflictConfig(BaseModel):
    """Conflict detector horizons.

    The correlation window decides which operations count as concurrent;
    the expiry horizon decides how long a conflict stays visible.
    """

    window_seconds: float = Field(default=5.0, gt=0, le=300)
    expiry_seconds: float = Field(default=10.0, gt=0, le=600)

    @model_validator(mode="after")
    def _expiry_covers_window(self) -> "ConflictConfig":
        if self.expiry_seconds < self.window_seconds:
            raise ValueError("expiry_seconds must be >= window_seconds")
        return self


class ActivityConfig(BaseModel):
    """Activity sparkline settings."""

    history_seconds: int = Field(
        default=20,
        ge=1,
        le=600,
        description="Seconds of per-second buckets kept; the sparkline is always 20 wide",
    )


class AgentScanConfig(BaseModel):
    """Sub-agent discovery settings."""

    running_threshold_seconds: int = Field(
        default=120,
        ge=1,
        le=3600,
        description="Agent files modified this recently are reported as running",
    )
    prefix_bytes: int = Field(
        default=8192,
        ge=512,
        le=1024 * 1024,
        description="Bytes read from the start of each agent transcript",
    )


class AppConfig(BaseModel):
    """Root application configuration.

    Loaded from config.yaml and validated with Pydantic.
    """

    claude_dir: str = Field(
        default_factory=lambda: str(Path.home() / ".claude"),
        description="Root of the CLI's data directory (debug/ and projects/)",
    )
    polling: PollingConfig = Field(default_factory=PollingConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    conflicts: ConflictConfig = Field(default_factory=ConflictConfig)
    activity: ActivityConfig = Field(default_factory=ActivityConfig)
    agents: AgentScanConfig = Field(default_factory=AgentScanConfig)
    session_index_ttl: float = Field(
        default=5.0,
        ge=0,
        le=300,
        description="Seconds a parsed sessions-index.json stays cached",
    )
    max_log_entries: int = Field(default=10_000, ge=100, le=1_000_000)
    max_recent_operations: int = Field(default=100, ge=10, le=10_000)
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$",
        description="Level for the application's own logging",
    )
    port: int = Field(
        default=5050,
        ge=1024,
        le=65535,
        description="Port for the Flask server",
    )
    debug: bool = Field(
        default=False,
        description="Enable Flask debug mode",
    )

    @property
    def claude_path(self) -> Path:
        return Path(self.claude_dir).expanduser()

    @property
    def debug_dir(self) -> Path:
        return self.claude_path / "debug"

    @property
    def projects_dir(self) -> Path:
        return self.claude_path / "projects"
