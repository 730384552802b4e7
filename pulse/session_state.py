import os
from dataclasses import dataclass, field
from enum import Enum, auto


class Family(Enum):
    CLAUDE = auto()    # ~/.claude/projects/<project>/*.jsonl
    CODEX = auto()     # ~/.codex/sessions/YYYY/MM/DD/*.jsonl

    @property
    def label(self):
        return self.name.lower()


class Status(Enum):
    ACTIVE = "active"
    WAITING = "waiting"


@dataclass
class ToolInfo:
    status: str
    kind: str


@dataclass
class Session:
    id: int
    family: Family
    source_path: str
    project_dir: str = ""
    read_offset: int = 0
    pending_partial_line: bytes = b""
    active_tools: dict = field(default_factory=dict)
    # parent tool id -> {nested tool id -> ToolInfo}
    active_subagent_tools: dict = field(default_factory=dict)
    is_waiting: bool = False
    permission_sent: bool = False
    had_tools_in_turn: bool = False

    @property
    def name(self):
        return os.path.basename(self.source_path)

    def clear_tools(self):
        """Drop all tool and subagent tracking. Returns True if any existed."""
        had_any = bool(self.active_tools or self.active_subagent_tools)
        self.active_tools.clear()
        self.active_subagent_tools.clear()
        return had_any


class SessionStore:
    """The one table of tracked sessions, shared by every component."""

    def __init__(self):
        self.sessions = {}      # id -> Session
        self.known_files = {}   # absolute path -> id
        self._next_id = 1

    def add(self, family, source_path, read_offset=0, project_dir=""):
        session = Session(
            id=self._next_id,
            family=family,
            source_path=source_path,
            project_dir=project_dir,
            read_offset=read_offset,
        )
        self._next_id += 1
        self.sessions[session.id] = session
        self.known_files[source_path] = session.id
        return session

    def get(self, session_id):
        return self.sessions.get(session_id)

    def remove(self, session_id):
        session = self.sessions.pop(session_id, None)
        if session is not None:
            self.known_files.pop(session.source_path, None)
        return session

    def id_for_path(self, path):
        return self.known_files.get(path)

    def __contains__(self, session_id):
        return session_id in self.sessions

    def __iter__(self):
        return iter(list(self.sessions.values()))

    def __len__(self):
        return len(self.sessions)
