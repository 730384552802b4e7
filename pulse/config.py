"""Tunable timings, display limits and storage roots."""
import os
from dataclasses import dataclass
from typing import Optional


# ── Timing (seconds) ─────────────────────────────────────────
DISCOVERY_SCAN_INTERVAL = 2.0
TRANSCRIPT_POLL_INTERVAL = 2.0
TOOL_DONE_DELAY = 0.3
PERMISSION_TIMER_DELAY = 7.0
TEXT_IDLE_DELAY = 5.0
AGENT_IDLE_TIMEOUT = 5 * 60.0

# ── Display truncation ──────────────────────────────────────
BASH_COMMAND_DISPLAY_MAX_LENGTH = 30
TASK_DESCRIPTION_DISPLAY_MAX_LENGTH = 40

# ── Storage roots ───────────────────────────────────────────
CLAUDE_PROJECTS_DIR = os.path.join("~", ".claude", "projects")
CODEX_SESSIONS_DIR = os.path.join("~", ".codex", "sessions")


def claude_projects_root() -> str:
    """Claude Code projects dir, respecting CLAUDE_CONFIG_DIR."""
    custom = os.environ.get("CLAUDE_CONFIG_DIR")
    if custom:
        return os.path.join(os.path.expanduser(custom), "projects")
    return os.path.expanduser(CLAUDE_PROJECTS_DIR)


def codex_sessions_root() -> str:
    """Codex sessions dir, respecting CODEX_HOME."""
    custom = os.environ.get("CODEX_HOME")
    if custom:
        return os.path.join(os.path.expanduser(custom), "sessions")
    return os.path.expanduser(CODEX_SESSIONS_DIR)


@dataclass
class Config:
    discovery_interval: float = DISCOVERY_SCAN_INTERVAL
    poll_interval: float = TRANSCRIPT_POLL_INTERVAL
    idle_timeout: float = AGENT_IDLE_TIMEOUT
    idle_delay: float = TEXT_IDLE_DELAY
    permission_delay: float = PERMISSION_TIMER_DELAY
    tool_done_delay: float = TOOL_DONE_DELAY
    command_display_max: int = BASH_COMMAND_DISPLAY_MAX_LENGTH
    description_display_max: int = TASK_DESCRIPTION_DISPLAY_MAX_LENGTH
    # None means "use the default root"; "" disables that family.
    claude_root: Optional[str] = None
    codex_root: Optional[str] = None
    watch_files: bool = True

    def resolved_claude_root(self):
        if self.claude_root is None:
            return claude_projects_root()
        return os.path.expanduser(self.claude_root) if self.claude_root else None

    def resolved_codex_root(self):
        if self.codex_root is None:
            return codex_sessions_root()
        return os.path.expanduser(self.codex_root) if self.codex_root else None
