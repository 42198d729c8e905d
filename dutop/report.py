from __future__ import annotations
from typing import Dict

from .models import AnalysisResult, DirectoryStats
from .ranker import rank, totals


def build_result(root: str,
                 buckets: Dict[str, DirectoryStats],
                 top_n: int,
                 skipped: int = 0,
                 cancelled: bool = False,
                 elapsed_sec: float = 0.0) -> AnalysisResult:
    total_size, total_files, total_dirs = totals(buckets)
    return AnalysisResult(
        root_path=root,
        total_size=total_size,
        total_files=total_files,
        total_dirs=total_dirs,
        top_directories=tuple(rank(buckets, top_n)),
        bucket_count=len(buckets),
        skipped=skipped,
        cancelled=cancelled,
        elapsed_sec=elapsed_sec,
    )
