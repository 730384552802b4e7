"""Single-threaded delayed actions: the loop's only suspension points.

Everything time-based (discovery ticks, transcript polls, the idle and
permission timers, delayed tool-done emissions) is a task in one
``Scheduler``. The owning loop calls ``run_due()``; nothing here starts
threads.
"""
import heapq
import itertools
import logging
import time

from pulse import events
from pulse.session_state import Status
from pulse.tool_status import is_permission_exempt

logger = logging.getLogger(__name__)


class Scheduler:
    """Deadline queue of keyed, cancelable callbacks.

    Scheduling a key that is already pending replaces it, so a restart
    moves the deadline instead of stacking a second firing. Cancelled
    entries stay in the heap and are skipped when popped.
    """

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self._heap = []
        self._tasks = {}   # key -> (seq, owner, callback, args)
        self._seq = itertools.count()

    def call_later(self, delay, callback, *args, key=None, owner=None):
        seq = next(self._seq)
        if key is None:
            key = ("task", seq)
        deadline = self.clock() + max(0.0, delay)
        self._tasks[key] = (seq, owner, callback, args)
        heapq.heappush(self._heap, (deadline, seq, key))
        return key

    def cancel(self, key):
        return self._tasks.pop(key, None) is not None

    def cancel_owner(self, owner):
        keys = [k for k, task in self._tasks.items() if task[1] == owner]
        for key in keys:
            del self._tasks[key]
        return len(keys)

    def pending(self, key):
        return key in self._tasks

    def next_deadline(self):
        while self._heap:
            deadline, seq, key = self._heap[0]
            task = self._tasks.get(key)
            if task is not None and task[0] == seq:
                return deadline
            heapq.heappop(self._heap)
        return None

    def run_due(self, now=None):
        """Fire every task whose deadline has passed. Returns the count."""
        if now is None:
            now = self.clock()
        fired = 0
        while self._heap and self._heap[0][0] <= now:
            _, seq, key = heapq.heappop(self._heap)
            task = self._tasks.get(key)
            if task is None or task[0] != seq:
                continue
            del self._tasks[key]
            _, _, callback, args = task
            callback(*args)
            fired += 1
        return fired

    def __len__(self):
        return len(self._tasks)


class StatusTimers:
    """The two per-session status timers plus delayed emissions.

    Callbacks carry only the session id and resolve the session from the
    store when they fire, so a timer outliving its session does nothing.
    """

    def __init__(self, scheduler, store, sink, config):
        self.scheduler = scheduler
        self.store = store
        self.sink = sink
        self.config = config

    # -- idle-waiting ------------------------------------------------------

    def start_waiting(self, session_id):
        self.scheduler.call_later(
            self.config.idle_delay, self._fire_waiting, session_id,
            key=(session_id, "waiting"), owner=session_id,
        )

    def cancel_waiting(self, session_id):
        self.scheduler.cancel((session_id, "waiting"))

    def _fire_waiting(self, session_id):
        session = self.store.get(session_id)
        if session is None:
            return
        session.is_waiting = True
        logger.debug(f"Agent {session_id} idle, waiting for input")
        self.sink.send(events.agent_status(session_id, Status.WAITING))

    # -- permission-pending ------------------------------------------------

    def start_permission(self, session_id):
        self.scheduler.call_later(
            self.config.permission_delay, self._fire_permission, session_id,
            key=(session_id, "permission"), owner=session_id,
        )

    def cancel_permission(self, session_id):
        self.scheduler.cancel((session_id, "permission"))

    def permission_pending(self, session_id):
        return self.scheduler.pending((session_id, "permission"))

    def _fire_permission(self, session_id):
        session = self.store.get(session_id)
        if session is None or not has_non_exempt_tool(session):
            return
        session.permission_sent = True
        logger.debug(f"Agent {session_id} looks blocked on a permission prompt")
        self.sink.send(events.permission_prompt(session_id))

    # -- misc --------------------------------------------------------------

    def emit_later(self, session_id, event):
        self.scheduler.call_later(
            self.config.tool_done_delay, self._emit, session_id, event,
            owner=session_id,
        )

    def _emit(self, session_id, event):
        if session_id in self.store:
            self.sink.send(event)

    def cancel_all(self, session_id):
        self.scheduler.cancel_owner(session_id)


def has_non_exempt_tool(session):
    for info in session.active_tools.values():
        if not is_permission_exempt(info.kind):
            return True
    for nested in session.active_subagent_tools.values():
        for info in nested.values():
            if not is_permission_exempt(info.kind):
                return True
    return False


def has_non_exempt_subagent_tool(session):
    for nested in session.active_subagent_tools.values():
        for info in nested.values():
            if not is_permission_exempt(info.kind):
                return True
    return False
