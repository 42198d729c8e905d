from __future__ import annotations
import os
from typing import Dict, Optional

import psutil


def default_worker_count() -> int:
    return psutil.cpu_count(logical=True) or os.cpu_count() or 1


def filesystem_usage(path: str) -> Optional[Dict[str, float]]:
    """Totals for the filesystem hosting `path`, or None when psutil cannot tell."""
    try:
        u = psutil.disk_usage(path)
    except OSError:
        return None
    return {
        "total": int(u.total),
        "used": int(u.used),
        "free": int(u.free),
        "percent": float(u.percent),
    }


def mountpoint_for(path: str) -> Optional[str]:
    # longest mountpoint prefix wins, same as the kernel's view
    best = None
    ap = os.path.abspath(path)
    for p in psutil.disk_partitions(all=True):
        mp = p.mountpoint
        if not mp:
            continue
        mp_norm = os.path.abspath(mp)
        prefix = mp_norm if mp_norm.endswith(os.sep) else mp_norm + os.sep
        if ap == mp_norm or ap.startswith(prefix):
            if best is None or len(mp_norm) > len(best):
                best = mp_norm
    return best
