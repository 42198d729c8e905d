from __future__ import annotations
import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from .aggregator import Aggregator
from .errors import ConfigError, PathNotFoundError, RootNotDirectoryError, ThreadPoolError
from .exclude import build_exclusion_matcher
from .host import default_worker_count
from .identity import IdentityTracker
from .models import AnalysisConfig, AnalysisResult
from .report import build_result
from .walker import DIR, TreeWalker, WalkEvent

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 10
PROGRESS_INTERVAL = 0.10

# Sizes can go well past 2**31; callers must not squeeze them into int32.
ProgressCb = Callable[[str, int, int, int], None]  # (current_path, files, dirs, bytes_scanned)


class CancelFlag:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    def __call__(self):
        return self._event.is_set()


class WorkerPool:
    """Thread pool owned by the caller and handed to analyze_disk_usage."""

    def __init__(self, workers: Optional[int] = None):
        if workers is not None and workers < 1:
            raise ConfigError(f"Invalid thread count: {workers}")
        self.workers = workers or default_worker_count()
        try:
            self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="dutop")
        except (ValueError, RuntimeError) as e:
            raise ThreadPoolError(f"Failed to configure thread pool: {e}") from e

    def submit(self, fn, *args) -> Future:
        return self._executor.submit(fn, *args)

    def shutdown(self, wait: bool = True, cancel_futures: bool = False):
        self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown(cancel_futures=exc_type is not None)
        return False


class _Progress:
    def __init__(self, cb: Optional[ProgressCb], agg: Aggregator, interval: float = PROGRESS_INTERVAL):
        self.cb = cb
        self.agg = agg
        self.interval = interval
        self._last = 0.0
        self._lock = threading.Lock()

    def __call__(self, cur: str, force: bool = False):
        if not self.cb:
            return
        now = time.monotonic()
        with self._lock:
            if not force and now - self._last < self.interval:
                return
            self._last = now
        size, files, dirs = self.agg.totals()
        self.cb(cur, files, dirs, size)


def _walk_subtree(walker: TreeWalker, agg: Aggregator, top: WalkEvent, emit: _Progress) -> None:
    # everything below one child of root shares that child's bucket
    bucket = top.path
    for ev in walker.walk(top.path, top.depth, top.ancestors):
        agg.add(ev, bucket)
        emit(ev.path)


def _check_root(path) -> str:
    root = os.path.abspath(os.fspath(path))
    if not os.path.exists(root):
        raise PathNotFoundError(root)
    if not os.path.isdir(root):
        raise RootNotDirectoryError(root)
    return root


def analyze_disk_usage(path,
                       config: Optional[AnalysisConfig] = None,
                       top_n: int = DEFAULT_TOP_N,
                       pool: Optional[WorkerPool] = None,
                       progress: Optional[ProgressCb] = None,
                       cancel_flag: Optional[Callable[[], bool]] = None,
                       identity=None) -> AnalysisResult:
    """
    Attribute on-disk bytes under `path` to each immediate child and rank them.

    Precondition failures (missing root, not a directory, bad pattern or
    thread count, pool construction) raise before anything is read.
    Unreadable entries are skipped and counted in `result.skipped`.
    The root is listed on the calling thread; every child directory is
    then walked as its own task on `pool` (or on a local pool sized from
    `config.num_threads` when none is given). `identity` overrides the
    platform's file-identity strategy used for hard-link detection.
    """
    t0 = time.time()
    config = config or AnalysisConfig()
    config.validate()
    root = _check_root(path)
    excluded = build_exclusion_matcher(config.exclude_patterns)

    own_pool = pool is None
    if own_pool:
        pool = WorkerPool(config.num_threads)

    stop = CancelFlag()

    def should_stop() -> bool:
        return stop() or bool(cancel_flag and cancel_flag())

    logger.info("Starting disk usage analysis for: %s", root)
    walker = TreeWalker(excluded, config.max_depth, config.follow_links, cancel_flag=should_stop)
    agg = Aggregator(root, IdentityTracker(identity))
    emit = _Progress(progress, agg)

    try:
        ancestors = walker.root_ancestors(root, os.stat(root))
        futures: List[Future] = []
        for ev in walker.list_dir(root, 0, ancestors):
            if ev.kind == DIR:
                agg.add(ev, ev.path)
                futures.append(pool.submit(_walk_subtree, walker, agg, ev, emit))
            else:
                agg.add(ev, root)
            emit(ev.path)
        for f in futures:
            f.result()
    except BaseException:
        # Ctrl-C or a bug in a worker: stop the other walkers before unwinding
        stop.cancel()
        raise
    finally:
        if own_pool:
            pool.shutdown(cancel_futures=stop())

    emit(root, force=True)
    cancelled = bool(cancel_flag and cancel_flag())
    skipped = walker.skipped
    if skipped:
        logger.info("Skipped %d items due to errors (use --debug to see details)", skipped)
    if cancelled:
        logger.info("Analysis cancelled; result is partial")

    result = build_result(root, agg.buckets(), top_n,
                          skipped=skipped, cancelled=cancelled, elapsed_sec=time.time() - t0)
    logger.info("Analysis complete: %d bytes, %d files, %d directories",
                result.total_size, result.total_files, result.total_dirs)
    return result
