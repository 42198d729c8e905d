from __future__ import annotations

import os
import stat
import threading
from types import SimpleNamespace

from dutop.aggregator import Aggregator, bucket_for
from dutop.identity import DeviceInodeIdentity, IdentityTracker, SyntheticIdentity
from dutop.usage import ApparentUsage
from dutop.walker import DIR, FILE, WalkEvent

ROOT = os.path.join(os.sep, "home", "user")


def p(*parts):
    return os.path.join(ROOT, *parts)


def fstat(ino, size, dev=1):
    return SimpleNamespace(st_dev=dev, st_ino=ino, st_size=size, st_mode=stat.S_IFREG | 0o644)


def dstat(ino, dev=1):
    return SimpleNamespace(st_dev=dev, st_ino=ino, st_size=0, st_mode=stat.S_IFDIR | 0o755)


def make_agg(identity=None):
    return Aggregator(ROOT, IdentityTracker(identity or DeviceInodeIdentity()), ApparentUsage())


def test_bucket_for_nested_path():
    assert bucket_for(p("projects", "rust", "src", "main.rs"), ROOT) == p("projects")


def test_bucket_for_root_level_file_and_root():
    assert bucket_for(p("notes.txt"), ROOT, is_file=True) == ROOT
    # a directory directly under root is a bucket of its own
    assert bucket_for(p("notes"), ROOT) == p("notes")
    assert bucket_for(p("notes", "deep.txt"), ROOT, is_file=True) == p("notes")
    assert bucket_for(ROOT, ROOT) == ROOT


def test_files_and_dirs_accumulate_per_bucket():
    agg = make_agg()
    agg.add(WalkEvent(DIR, p("a"), 1, dstat(100)))
    agg.add(WalkEvent(DIR, p("a", "sub"), 2, dstat(101)))
    agg.add(WalkEvent(FILE, p("a", "sub", "x"), 3, fstat(1, 300)))
    agg.add(WalkEvent(FILE, p("a", "y"), 2, fstat(2, 200)))
    agg.add(WalkEvent(DIR, p("b"), 1, dstat(102)))
    agg.add(WalkEvent(FILE, p("b", "z"), 2, fstat(3, 50)))

    buckets = agg.buckets()
    assert set(buckets) == {p("a"), p("b")}
    assert (buckets[p("a")].size, buckets[p("a")].file_count, buckets[p("a")].dir_count) == (500, 2, 2)
    assert (buckets[p("b")].size, buckets[p("b")].file_count, buckets[p("b")].dir_count) == (50, 1, 1)
    assert agg.totals() == (550, 3, 3)


def test_root_files_use_root_bucket_when_told():
    agg = make_agg()
    agg.add(WalkEvent(FILE, p("top.txt"), 1, fstat(1, 10)), ROOT)
    assert agg.buckets()[ROOT].file_count == 1


def test_hard_link_counted_once_in_first_bucket():
    agg = make_agg()
    assert agg.add_file(p("a", "f"), fstat(7, 1000)) is True
    assert agg.add_file(p("b", "f"), fstat(7, 1000)) is False
    buckets = agg.buckets()
    assert buckets[p("a")].size == 1000
    assert p("b") not in buckets
    assert agg.totals() == (1000, 1, 0)
    assert agg.hardlinks_skipped == 1


def test_synthetic_identity_counts_every_path():
    agg = make_agg(SyntheticIdentity())
    agg.add_file(p("a", "f"), fstat(7, 1000))
    agg.add_file(p("b", "f"), fstat(7, 1000))
    assert agg.totals() == (2000, 2, 0)


def test_root_directory_is_not_counted():
    agg = make_agg()
    agg.add_dir(ROOT)
    assert agg.buckets() == {}
    assert agg.totals() == (0, 0, 0)


def test_concurrent_adds_do_not_race():
    agg = make_agg()
    n_threads, per_thread = 8, 500

    def worker(t):
        for i in range(per_thread):
            ino = t * per_thread + i
            agg.add_file(p("bucket%d" % (i % 3), "f%d" % ino), fstat(ino + 1, 1))
            # every thread also tries the same shared inode
            agg.add_file(p("shared", "h%d" % t), fstat(999999, 5))

    threads = [threading.Thread(target=worker, args=(t,)) for t in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    size, files, _ = agg.totals()
    assert files == n_threads * per_thread + 1
    assert size == n_threads * per_thread + 5
    assert sum(s.file_count for s in agg.buckets().values()) == files


def test_injected_tracker_and_usage_are_kept():
    tracker = IdentityTracker(SyntheticIdentity())
    usage = ApparentUsage()
    agg = Aggregator(ROOT, tracker, usage)
    assert agg.tracker is tracker
    assert agg.usage is usage
    assert isinstance(agg.tracker.strategy, SyntheticIdentity)


def test_root_level_files_without_explicit_bucket_go_to_root():
    agg = make_agg()
    agg.add(WalkEvent(FILE, p("one"), 1, fstat(1, 10)))
    agg.add(WalkEvent(FILE, p("two"), 1, fstat(2, 20)))
    agg.add(WalkEvent(DIR, p("a"), 1, dstat(3)))
    buckets = agg.buckets()
    assert set(buckets) == {ROOT, p("a")}
    assert (buckets[ROOT].size, buckets[ROOT].file_count, buckets[ROOT].dir_count) == (30, 2, 0)
