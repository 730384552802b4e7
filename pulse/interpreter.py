import json
import logging

from pulse.session_state import Family
from pulse.watchers.claude import ClaudeWatcher
from pulse.watchers.codex import CodexWatcher

logger = logging.getLogger(__name__)

WATCHER_CLASSES = {
    Family.CLAUDE: ClaudeWatcher,
    Family.CODEX: CodexWatcher,
}


class TranscriptInterpreter:
    """Parse transcript lines and hand them to the session's family watcher."""

    def __init__(self, store, timers, sink, config):
        self.store = store
        self.watchers = {
            family: cls(store, timers, sink, config)
            for family, cls in WATCHER_CLASSES.items()
        }

    def process_line(self, session_id, line):
        session = self.store.get(session_id)
        if session is None:
            return
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            # Partial writes at the tail are expected
            logger.debug(f"Agent {session_id}: skipping malformed line {line[:80]!r}")
            return
        if not isinstance(record, dict):
            return
        self.watchers[session.family].process_record(session, record)
