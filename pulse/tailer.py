import logging
import os

from pulse import events

logger = logging.getLogger(__name__)


class SessionTailer:
    """Incremental reader for session transcripts.

    ``read_new_lines`` is driven purely by ``Session.read_offset``, so the
    change-notification trigger and the poll trigger may both fire for
    the same bytes without anything being processed twice.
    """

    def __init__(self, store, timers, sink, on_line):
        self.store = store
        self.timers = timers
        self.sink = sink
        self.on_line = on_line

    def read_new_lines(self, session_id):
        session = self.store.get(session_id)
        if session is None:
            return 0

        try:
            size = os.path.getsize(session.source_path)
            if size <= session.read_offset:
                return 0
            with open(session.source_path, "rb") as f:
                f.seek(session.read_offset)
                data = f.read(size - session.read_offset)
        except OSError as e:
            logger.debug(f"Read error for agent {session_id}: {e}")
            return 0
        session.read_offset += len(data)

        pieces = (session.pending_partial_line + data).split(b"\n")
        session.pending_partial_line = pieces.pop()
        lines = [p.decode("utf-8", errors="replace").strip() for p in pieces]
        lines = [line for line in lines if line]
        if not lines:
            return 0

        self._on_activity(session)
        for line in lines:
            self.on_line(session_id, line)
        return len(lines)

    def _on_activity(self, session):
        self.timers.cancel_waiting(session.id)
        self.timers.cancel_permission(session.id)
        if session.permission_sent:
            session.permission_sent = False
            self.sink.send(events.permission_prompt_cleared(session.id))
