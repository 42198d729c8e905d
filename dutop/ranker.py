from __future__ import annotations
from typing import Dict, List, Tuple

from .models import DirectoryEntry, DirectoryStats


def totals(buckets: Dict[str, DirectoryStats]) -> Tuple[int, int, int]:
    size = files = dirs = 0
    for s in buckets.values():
        size += s.size
        files += s.file_count
        dirs += s.dir_count
    return size, files, dirs


def rank(buckets: Dict[str, DirectoryStats], top_n: int) -> List[DirectoryEntry]:
    # full sort before truncation; ties fall back to path order so reruns agree
    entries = [DirectoryEntry(path=key, size=s.size, file_count=s.file_count, dir_count=s.dir_count)
               for key, s in buckets.items()]
    entries.sort(key=lambda e: (-e.size, e.path))
    if top_n <= 0:
        return []
    return entries[:top_n]
