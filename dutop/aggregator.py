from __future__ import annotations
import logging
import os
import threading
from typing import Dict, Optional, Tuple

from .identity import IdentityTracker
from .models import DirectoryStats
from .usage import default_usage
from .walker import DIR, FILE, WalkEvent

logger = logging.getLogger(__name__)


def bucket_for(path: str, root: str, is_file: bool = False) -> str:
    """The immediate child of `root` that contains `path`; root itself for files directly in root."""
    rel = os.path.relpath(path, root)
    if rel in (os.curdir, ""):
        return root
    first = rel.split(os.sep, 1)[0]
    if os.altsep:
        first = first.split(os.altsep, 1)[0]
    if first == os.pardir:
        # not under root at all; give it a bucket of its own
        return path
    if is_file and first == rel:
        return root
    return os.path.join(root, first)


class Aggregator:
    """
    Accumulates walker events into per-bucket DirectoryStats.

    Safe to feed from several threads at once: the bucket map is guarded
    by one lock, each bucket's counters by their own, and hard-link
    detection goes through the tracker's atomic insert-if-absent.
    A hard-linked file lands in whichever bucket reaches it first.
    """

    def __init__(self, root: str, tracker: Optional[IdentityTracker] = None, usage=None):
        self.root = root
        self.tracker = tracker if tracker is not None else IdentityTracker()
        self.usage = usage if usage is not None else default_usage()
        self._buckets: Dict[str, Tuple[DirectoryStats, threading.Lock]] = {}
        self._map_lock = threading.Lock()
        self._totals_lock = threading.Lock()
        self.total_files = 0
        self.total_dirs = 0
        self.total_size = 0
        self.hardlinks_skipped = 0

    def _bucket(self, key: str) -> Tuple[DirectoryStats, threading.Lock]:
        slot = self._buckets.get(key)
        if slot is None:
            with self._map_lock:
                slot = self._buckets.get(key)
                if slot is None:
                    slot = (DirectoryStats(), threading.Lock())
                    self._buckets[key] = slot
        return slot

    def add_file(self, path: str, st: os.stat_result, bucket: Optional[str] = None) -> bool:
        key = self.tracker.key_for(st)
        if self.tracker.seen(key):
            logger.debug("Skipping hard link: %s", path)
            with self._totals_lock:
                self.hardlinks_skipped += 1
            return False

        size = self.usage.usage_bytes(st)
        stats, lock = self._bucket(bucket or bucket_for(path, self.root, is_file=True))
        with lock:
            stats.add_file(size)
        with self._totals_lock:
            self.total_files += 1
            self.total_size += size
        return True

    def add_dir(self, path: str, bucket: Optional[str] = None) -> None:
        if path == self.root:
            return
        stats, lock = self._bucket(bucket or bucket_for(path, self.root))
        with lock:
            stats.add_dir()
        with self._totals_lock:
            self.total_dirs += 1

    def add(self, ev: WalkEvent, bucket: Optional[str] = None) -> None:
        if ev.kind == FILE:
            self.add_file(ev.path, ev.stat, bucket)
        elif ev.kind == DIR:
            self.add_dir(ev.path, bucket)

    def totals(self) -> Tuple[int, int, int]:
        with self._totals_lock:
            return self.total_size, self.total_files, self.total_dirs

    def buckets(self) -> Dict[str, DirectoryStats]:
        """Copy of the bucket map; take it once the walk is over."""
        with self._map_lock:
            items = list(self._buckets.items())
        out: Dict[str, DirectoryStats] = {}
        for key, (stats, lock) in items:
            with lock:
                out[key] = DirectoryStats(stats.size, stats.file_count, stats.dir_count)
        return out
