import logging
import time

from pulse import events
from pulse.config import Config
from pulse.discovery import SessionDiscovery, default_roots
from pulse.events import CollectingSink
from pulse.file_events import FileChangeWatcher
from pulse.interpreter import TranscriptInterpreter
from pulse.scheduler import Scheduler, StatusTimers
from pulse.session_state import SessionStore
from pulse.tailer import SessionTailer

logger = logging.getLogger(__name__)

# Upper bound on one blocking wait, so Ctrl-C is handled promptly.
MAX_WAIT = 1.0


class Monitor:
    """Wires discovery, tailing, interpretation and timers onto one loop.

    Every callback runs on the thread that calls ``tick()`` / ``run()``.
    Tests drive it with a fake ``clock`` and ``observe_files=False``.
    """

    def __init__(self, config=None, sink=None, roots=None,
                 clock=time.monotonic, wall_clock=time.time,
                 observe_files=None):
        self.config = config or Config()
        self.sink = sink if sink is not None else CollectingSink()
        self.store = SessionStore()
        self.scheduler = Scheduler(clock)
        self.timers = StatusTimers(self.scheduler, self.store, self.sink,
                                   self.config)
        self.interpreter = TranscriptInterpreter(self.store, self.timers,
                                                 self.sink, self.config)
        self.tailer = SessionTailer(self.store, self.timers, self.sink,
                                    self.interpreter.process_line)
        if roots is None:
            roots = default_roots(self.config)
        self.discovery = SessionDiscovery(
            self.store, roots, self.config.idle_timeout,
            on_discovered=self._on_discovered,
            on_dormant=self._on_dormant,
            wall_clock=wall_clock,
        )
        if observe_files is None:
            observe_files = self.config.watch_files
        self.file_watcher = FileChangeWatcher() if observe_files else None
        self._started = False

    def start(self):
        if self._started:
            return
        self._started = True
        self._scan()

    def stop(self):
        self._started = False
        for session in self.store:
            self.timers.cancel_all(session.id)
        self.scheduler.cancel("discovery")
        if self.file_watcher is not None:
            self.file_watcher.stop()

    def run(self):
        self.start()
        try:
            while True:
                self.tick()
                self._wait()
        finally:
            self.stop()

    def tick(self, now=None):
        if self.file_watcher is not None:
            for path in self.file_watcher.drain():
                self._on_file_changed(path)
        return self.scheduler.run_due(now)

    def _wait(self):
        deadline = self.scheduler.next_deadline()
        timeout = MAX_WAIT
        if deadline is not None:
            timeout = min(MAX_WAIT, max(0.0, deadline - self.scheduler.clock()))
        if self.file_watcher is None:
            time.sleep(timeout)
            return
        path = self.file_watcher.get(timeout)
        if path is not None:
            self._on_file_changed(path)

    # -- discovery -----------------------------------------------------------

    def _scan(self):
        self.discovery.scan()
        self.scheduler.call_later(self.config.discovery_interval, self._scan,
                                  key="discovery")

    def _on_discovered(self, session):
        self.sink.send(events.agent_discovered(session))
        self._schedule_poll(session.id)
        if self.file_watcher is not None:
            self.file_watcher.watch(session.source_path)

    def _on_dormant(self, session):
        self.timers.cancel_all(session.id)
        if self.file_watcher is not None:
            self.file_watcher.unwatch(session.source_path)
        self.sink.send(events.agent_dormant(session.id))

    # -- tailing -------------------------------------------------------------

    def _schedule_poll(self, session_id):
        self.scheduler.call_later(self.config.poll_interval, self._poll,
                                  session_id, key=(session_id, "poll"),
                                  owner=session_id)

    def _poll(self, session_id):
        if session_id not in self.store:
            return
        try:
            self.tailer.read_new_lines(session_id)
        finally:
            if session_id in self.store:
                self._schedule_poll(session_id)

    def _on_file_changed(self, path):
        session_id = self.store.id_for_path(path)
        if session_id is not None:
            self.tailer.read_new_lines(session_id)

    def get_status(self):
        return self.discovery.get_status()
