import glob
import logging
import os
import time
from dataclasses import dataclass

from pulse.session_state import Family

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageRoot:
    family: Family
    path: str
    # Claude keeps one flat dir per project; Codex nests YYYY/MM/DD.
    recursive: bool = False


def default_roots(config):
    roots = []
    claude = config.resolved_claude_root()
    if claude:
        roots.append(StorageRoot(Family.CLAUDE, claude))
    codex = config.resolved_codex_root()
    if codex:
        roots.append(StorageRoot(Family.CODEX, codex, recursive=True))
    return roots


class SessionDiscovery:
    """Find live transcripts under the storage roots and retire stale ones.

    A file is live while its mtime is within ``idle_timeout`` seconds.
    New sessions start reading at the current end of file; history from
    before discovery is never replayed.
    """

    def __init__(self, store, roots, idle_timeout, on_discovered=None,
                 on_dormant=None, wall_clock=time.time):
        self.store = store
        self.roots = list(roots)
        self.idle_timeout = idle_timeout
        self.on_discovered = on_discovered
        self.on_dormant = on_dormant
        self.wall_clock = wall_clock

    def scan(self):
        for root in self.roots:
            for path in self._find_transcripts(root):
                self._try_register(path, root.family)
        self._retire_dormant()

    def _find_transcripts(self, root):
        if not os.path.isdir(root.path):
            return []
        if root.recursive:
            pattern = os.path.join(glob.escape(root.path), "**", "*.jsonl")
            return glob.glob(pattern, recursive=True)

        files = []
        try:
            entries = os.listdir(root.path)
        except OSError as e:
            logger.debug(f"Cannot list {root.path}: {e}")
            return files
        for entry in entries:
            project_dir = os.path.join(root.path, entry)
            if not os.path.isdir(project_dir):
                continue
            files.extend(glob.glob(os.path.join(glob.escape(project_dir), "*.jsonl")))
        return files

    def _try_register(self, path, family):
        path = os.path.abspath(path)
        if self.store.id_for_path(path) is not None:
            return
        try:
            stat = os.stat(path)
        except OSError as e:
            logger.debug(f"Cannot stat {path}: {e}")
            return
        if self.wall_clock() - stat.st_mtime > self.idle_timeout:
            return

        session = self.store.add(family, path, read_offset=stat.st_size,
                                 project_dir=os.path.dirname(path))
        logger.info(f"{family.label} agent {session.id} discovered: "
                    f"{session.name}")
        if self.on_discovered:
            self.on_discovered(session)

    def _retire_dormant(self):
        now = self.wall_clock()
        for session in self.store:
            try:
                mtime = os.stat(session.source_path).st_mtime
            except OSError:
                mtime = None
            if mtime is not None and now - mtime <= self.idle_timeout:
                continue
            self.store.remove(session.id)
            reason = "gone" if mtime is None else "idle"
            logger.info(f"Agent {session.id} dormant ({reason}): {session.name}")
            if self.on_dormant:
                self.on_dormant(session)

    def get_status(self):
        if not len(self.store):
            return "No active sessions found"
        counts = {}
        for session in self.store:
            label = session.family.label
            counts[label] = counts.get(label, 0) + 1
        detail = ", ".join(f"{n} {label}" for label, n in sorted(counts.items()))
        noun = "session" if len(self.store) == 1 else "sessions"
        return f"{len(self.store)} {noun} ({detail})"
