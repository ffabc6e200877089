"""claude-watch: live monitor for Claude Code CLI sessions."""

__version__ = "0.1.0"
