from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ConfigError

@dataclass(frozen=True)
class AnalysisConfig:
    max_depth: Optional[int] = None          # None = unlimited
    exclude_patterns: Tuple[str, ...] = ()
    follow_links: bool = False
    num_threads: Optional[int] = None        # None = one worker per CPU

    def __post_init__(self):
        # callers hand in lists from argparse; keep the instance hashable/immutable
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns or ()))

    def validate(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ConfigError(f"Invalid max depth: {self.max_depth}")
        if self.num_threads is not None and self.num_threads < 1:
            raise ConfigError(f"Invalid thread count: {self.num_threads}")

@dataclass
class DirectoryStats:
    size: int = 0
    file_count: int = 0
    dir_count: int = 0

    def add_file(self, size: int) -> None:
        self.size += size
        self.file_count += 1

    def add_dir(self) -> None:
        self.dir_count += 1

@dataclass(frozen=True)
class DirectoryEntry:
    path: str
    size: int
    file_count: int
    dir_count: int

    @property
    def name(self) -> str:
        return os.path.basename(self.path.rstrip("\\/")) or "."

@dataclass(frozen=True)
class AnalysisResult:
    root_path: str
    total_size: int
    total_files: int
    total_dirs: int
    top_directories: Tuple[DirectoryEntry, ...] = field(default_factory=tuple)
    bucket_count: int = 0
    skipped: int = 0
    cancelled: bool = False
    elapsed_sec: float = field(default=0.0, compare=False)
