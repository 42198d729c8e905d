from __future__ import annotations
import itertools
import logging
import os
import threading
from typing import Optional, Set, Tuple

logger = logging.getLogger(__name__)

IdentityKey = Tuple[int, int]  # (device, inode) or (volume serial, file index)


class SyntheticIdentity:
    """Every call yields a fresh key: no hard link is ever recognised."""

    def __init__(self):
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def key_for(self, st: os.stat_result) -> IdentityKey:
        with self._lock:
            return (-1, next(self._counter))


class DeviceInodeIdentity:
    """st_dev/st_ino pair; on Windows these are the volume serial and file index."""

    def __init__(self):
        self._fallback = SyntheticIdentity()
        self._warned = False

    def key_for(self, st: os.stat_result) -> IdentityKey:
        ino = getattr(st, "st_ino", 0) or 0
        if ino == 0:
            # filesystem gave us nothing usable for this entry
            if not self._warned:
                self._warned = True
                logger.warning("No stable file identity available; hard links will not be deduplicated")
            return self._fallback.key_for(st)
        return (int(st.st_dev), int(ino))


def default_identity():
    if os.name in ("posix", "nt"):
        return DeviceInodeIdentity()
    logger.warning("Platform %s has no file identity; hard links will be counted per path", os.name)
    return SyntheticIdentity()


class IdentityTracker:
    """Run-scoped set of identity keys shared by all walker threads."""

    def __init__(self, strategy=None):
        self.strategy = strategy if strategy is not None else default_identity()
        self._seen: Set[IdentityKey] = set()
        self._lock = threading.Lock()

    def key_for(self, st: os.stat_result) -> IdentityKey:
        return self.strategy.key_for(st)

    def seen(self, key: IdentityKey) -> bool:
        # insert-if-absent; True when some other path got there first
        with self._lock:
            if key in self._seen:
                return True
            self._seen.add(key)
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)


def dir_key(st: os.stat_result) -> Optional[IdentityKey]:
    """Key used for symlink-loop detection; None when the inode is unknown."""
    ino = getattr(st, "st_ino", 0) or 0
    if ino == 0:
        return None
    return (int(st.st_dev), int(ino))
