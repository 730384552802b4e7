"""Change notification for transcript files via watchdog.

The observer thread only pushes paths onto a queue; the monitor loop
drains it, so session state is never touched off the loop thread.
"""
import logging
import os
import queue

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class TranscriptEventHandler(FileSystemEventHandler):
    """Queue the path of every modified or created transcript."""

    def __init__(self, changes):
        super().__init__()
        self.changes = changes

    def on_modified(self, event):
        self._enqueue(event)

    def on_created(self, event):
        self._enqueue(event)

    def _enqueue(self, event):
        if event.is_directory:
            return
        path = os.fsdecode(event.src_path)
        if path.endswith(".jsonl"):
            self.changes.put(os.path.abspath(path))


class FileChangeWatcher:
    """One watchdog watch per directory holding a tracked transcript."""

    def __init__(self, observer_factory=Observer):
        self.changes = queue.SimpleQueue()
        self._handler = TranscriptEventHandler(self.changes)
        self._observer_factory = observer_factory
        self._observer = None
        self._watches = {}   # dir -> (watch, refcount)

    def watch(self, path):
        """Start watching ``path``'s directory. False if unavailable."""
        directory = os.path.dirname(path)
        if directory in self._watches:
            watch, count = self._watches[directory]
            self._watches[directory] = (watch, count + 1)
            return True
        try:
            if self._observer is None:
                self._observer = self._observer_factory()
                self._observer.daemon = True
                self._observer.start()
            watch = self._observer.schedule(self._handler, directory,
                                            recursive=False)
        except OSError as e:
            logger.warning(f"Cannot watch {directory}: {e}, polling only")
            return False
        self._watches[directory] = (watch, 1)
        return True

    def unwatch(self, path):
        directory = os.path.dirname(path)
        if directory not in self._watches:
            return
        watch, count = self._watches[directory]
        if count > 1:
            self._watches[directory] = (watch, count - 1)
            return
        del self._watches[directory]
        try:
            self._observer.unschedule(watch)
        except (KeyError, OSError) as e:
            logger.debug(f"Unschedule failed for {directory}: {e}")

    def get(self, timeout):
        """Block up to ``timeout`` seconds for the next changed path."""
        try:
            return self.changes.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self):
        paths = []
        while True:
            try:
                paths.append(self.changes.get_nowait())
            except queue.Empty:
                return paths

    def stop(self):
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=2.0)
            self._observer = None
        self._watches.clear()
