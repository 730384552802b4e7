"""Transcript interpreters, one per agent family."""
import logging

from pulse import events
from pulse.session_state import Status, ToolInfo
from pulse.tool_status import is_permission_exempt

logger = logging.getLogger(__name__)


def as_str(value):
    """Ids and tool names are only usable as strings; anything else is ""."""
    return value if isinstance(value, str) else ""


class BaseWatcher:
    """Base class for per-family transcript interpreters.

    A watcher receives one decoded JSON record at a time for a session and
    turns it into session-state changes, timer starts/cancels and events
    on the sink. The transitions both families share live here; the
    record schemas do not, since the two formats have nothing in common.
    """

    # Human-readable source name used in log lines.
    SOURCE_NAME: str = "UNKNOWN"

    def __init__(self, store, timers, sink, config):
        self.store = store
        self.timers = timers
        self.sink = sink
        self.config = config

    def process_record(self, session, record: dict) -> None:
        raise NotImplementedError

    # -- shared transitions ------------------------------------------------

    def mark_active(self, session):
        self.timers.cancel_waiting(session.id)
        session.is_waiting = False
        self.sink.send(events.agent_status(session.id, Status.ACTIVE))

    def start_tool(self, session, tool_id, kind, status):
        """Track a tool call. Returns True if it may need approval."""
        logger.debug(f"{self.SOURCE_NAME} agent {session.id} tool start: "
                     f"{tool_id} {status}")
        session.active_tools[tool_id] = ToolInfo(status=status, kind=kind)
        self.sink.send(events.tool_start(session.id, tool_id, status))
        return not is_permission_exempt(kind)

    def finish_tool(self, session, tool_id):
        logger.debug(f"{self.SOURCE_NAME} agent {session.id} tool done: {tool_id}")
        session.active_tools.pop(tool_id, None)
        self.timers.emit_later(session.id, events.tool_done(session.id, tool_id))

    def clear_tools(self, session):
        if session.clear_tools():
            self.sink.send(events.tools_cleared(session.id))

    def reset_turn(self, session, waiting):
        """Drop all in-flight state at a turn boundary."""
        self.timers.cancel_waiting(session.id)
        self.timers.cancel_permission(session.id)
        self.clear_tools(session)
        session.is_waiting = waiting
        session.permission_sent = False
        session.had_tools_in_turn = False
        status = Status.WAITING if waiting else Status.ACTIVE
        self.sink.send(events.agent_status(session.id, status))

    def end_turn(self, session):
        self.reset_turn(session, waiting=True)
