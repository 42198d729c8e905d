from __future__ import annotations
import logging
import os
import stat as statmod
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from .exclude import Matcher
from .identity import IdentityKey, dir_key

logger = logging.getLogger(__name__)

FILE = "file"
DIR = "dir"

Ancestors = Tuple[Optional[IdentityKey], ...]


@dataclass(frozen=True)
class WalkEvent:
    kind: str                 # FILE or DIR
    path: str
    depth: int                # root's children are depth 1
    stat: os.stat_result
    ancestors: Ancestors = ()  # open directories down to (and including) this one, when following links


class TreeWalker:
    """
    Depth-first directory traversal built on os.scandir.

    Directories beyond `max_depth` and entries whose name matches `excluded`
    are pruned silently. Unreadable entries are skipped and counted in
    `skipped`; they never abort the walk. One walker may be shared by
    several threads, each walking its own subtree.
    """

    def __init__(self,
                 excluded: Matcher,
                 max_depth: Optional[int] = None,
                 follow_links: bool = False,
                 cancel_flag: Optional[Callable[[], bool]] = None):
        self.excluded = excluded
        self.max_depth = max_depth
        self.follow_links = follow_links
        self.cancel_flag = cancel_flag
        self._skipped = 0
        self._lock = threading.Lock()

    @property
    def skipped(self) -> int:
        with self._lock:
            return self._skipped

    def cancelled(self) -> bool:
        return bool(self.cancel_flag and self.cancel_flag())

    def _skip(self, path: str, err: object) -> None:
        logger.debug("Skipping %s: %s", path, err)
        with self._lock:
            self._skipped += 1

    def root_ancestors(self, root: str, st: os.stat_result) -> Ancestors:
        return (dir_key(st),) if self.follow_links else ()

    def list_dir(self, path: str, depth: int, ancestors: Ancestors = ()) -> Iterator[WalkEvent]:
        """Events for the immediate entries of `path`, which sits at `depth`."""
        if self.cancelled():
            return
        try:
            with os.scandir(path) as it:
                entries: List[os.DirEntry] = list(it)
        except OSError as e:
            self._skip(path, e)
            return

        child_depth = depth + 1
        follow = self.follow_links
        for entry in entries:
            if self.cancelled():
                return
            if self.excluded(entry.name):
                continue
            try:
                if not follow and entry.is_symlink():
                    continue
                st = entry.stat(follow_symlinks=follow)
            except OSError as e:
                # vanished, permission denied, or a dangling link
                self._skip(entry.path, e)
                continue

            mode = st.st_mode
            if statmod.S_ISDIR(mode):
                if self.max_depth is not None and child_depth > self.max_depth:
                    continue
                child_anc: Ancestors = ()
                if follow:
                    key = dir_key(st)
                    if key is not None and key in ancestors:
                        self._skip(entry.path, "symlink loop to an open ancestor")
                        continue
                    child_anc = ancestors + (key,)
                yield WalkEvent(DIR, entry.path, child_depth, st, child_anc)
            elif statmod.S_ISREG(mode):
                if os.name == "nt" and not st.st_ino:
                    # scandir leaves st_ino empty on Windows
                    try:
                        st = os.stat(entry.path, follow_symlinks=follow)
                    except OSError as e:
                        self._skip(entry.path, e)
                        continue
                yield WalkEvent(FILE, entry.path, child_depth, st)

    def walk(self, top: str, depth: int = 0, ancestors: Ancestors = ()) -> Iterator[WalkEvent]:
        """Every reachable entry strictly beneath `top`, each exactly once."""
        stack: List[Tuple[str, int, Ancestors]] = [(top, depth, ancestors)]
        while stack:
            if self.cancelled():
                return
            path, d, anc = stack.pop()
            for ev in self.list_dir(path, d, anc):
                yield ev
                if ev.kind == DIR:
                    stack.append((ev.path, ev.depth, ev.ancestors))
