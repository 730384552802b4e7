"""
Pytest configuration and fixtures for agent-pulse tests.
"""

import sys
from pathlib import Path

# Ensure project root is in sys.path for 'pulse' imports without installing
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))
if str(Path(__file__).parent) not in sys.path:
    sys.path.insert(0, str(Path(__file__).parent))

import pytest

from pulse.config import Config
from pulse.events import CollectingSink
from pulse.interpreter import TranscriptInterpreter
from pulse.scheduler import Scheduler, StatusTimers
from pulse.session_state import Family, SessionStore
from pulse.tailer import SessionTailer

from transcripts import jsonl


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class Harness:
    """Store, timers, interpreter and tailer wired together without discovery."""

    def __init__(self, tmp_path, clock, config, sink):
        self.tmp_path = tmp_path
        self.clock = clock
        self.config = config
        self.sink = sink
        self.store = SessionStore()
        self.scheduler = Scheduler(clock)
        self.timers = StatusTimers(self.scheduler, self.store, sink, config)
        self.interpreter = TranscriptInterpreter(self.store, self.timers,
                                                 sink, config)
        self.tailer = SessionTailer(self.store, self.timers, sink,
                                    self.interpreter.process_line)

    def add_session(self, family=Family.CLAUDE, name="session.jsonl"):
        path = self.tmp_path / name
        path.touch()
        return self.store.add(family, str(path), read_offset=0,
                              project_dir=str(self.tmp_path))

    def append(self, session, *records):
        """Write records to the transcript and tail them in."""
        with open(session.source_path, "a") as f:
            f.write(jsonl(*records))
        return self.tailer.read_new_lines(session.id)

    def advance(self, seconds):
        self.clock.advance(seconds)
        return self.scheduler.run_due()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    # Defaults: idle 5s, permission 7s, tool-done 0.3s, poll/discovery 2s
    return Config(watch_files=False)


@pytest.fixture
def sink():
    return CollectingSink()


@pytest.fixture
def harness(tmp_path, clock, config, sink):
    return Harness(tmp_path, clock, config, sink)


@pytest.fixture
def claude_session(harness):
    return harness.add_session(Family.CLAUDE)


@pytest.fixture
def codex_session(harness):
    return harness.add_session(Family.CODEX, name="rollout-test.jsonl")
