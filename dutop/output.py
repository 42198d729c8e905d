from __future__ import annotations
import json
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional, TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .host import filesystem_usage, mountpoint_for
from .models import AnalysisResult, DirectoryEntry
from .utils import clamp, format_percentage, format_size_auto, percentage

GREEN = "color(34)"
YELLOW = "color(220)"
RED = "color(160)"

@dataclass
class OutputConfig:
    use_colors: bool = True
    bar_width: int = 30
    size_width: int = 8
    percent_width: int = 5
    name_width: int = 30
    show_filesystem: bool = False

def select_color(bar_length: int, bar_width: int) -> str:
    if bar_length >= bar_width * 50 // 100:
        return RED
    if bar_length >= bar_width * 33 // 100:
        return YELLOW
    return GREEN

def display_name(entry: DirectoryEntry, width: int) -> str:
    name = printable_path(entry.name)
    if len(name) > width:
        return name[:width - 3] + "..."
    return name

def _bar(entry: DirectoryEntry, max_size: int, cfg: OutputConfig) -> Text:
    n = int(entry.size / max_size * cfg.bar_width) if max_size > 0 else 0
    n = clamp(n, 0, cfg.bar_width)
    style = select_color(n, cfg.bar_width) if cfg.use_colors else ""
    return Text("█" * n + "░" * (cfg.bar_width - n), style=style)

def make_console(use_colors: bool, file: Optional[TextIO] = None, width: Optional[int] = None) -> Console:
    return Console(file=file, width=width, no_color=not use_colors, highlight=False, soft_wrap=True)

def print_results(result: AnalysisResult, cfg: Optional[OutputConfig] = None,
                  console: Optional[Console] = None) -> None:
    cfg = cfg or OutputConfig()
    console = console or make_console(cfg.use_colors)

    console.print()
    console.print(f"Analyzing: {printable_path(result.root_path)}", markup=False)
    console.print()

    if not result.top_directories:
        table = Table(box=box.SQUARE, show_header=False)
        table.add_column(min_width=18)
        table.add_row("No files found")
        console.print(table)
        return

    max_size = result.top_directories[0].size or 1
    table = Table(box=box.SQUARE, show_header=False, pad_edge=True)
    table.add_column(width=cfg.bar_width, no_wrap=True)
    table.add_column(justify="right", min_width=cfg.size_width, no_wrap=True)
    table.add_column(justify="right", min_width=cfg.percent_width, no_wrap=True)
    table.add_column(justify="left", min_width=cfg.name_width, no_wrap=True)
    for d in result.top_directories:
        table.add_row(
            _bar(d, max_size, cfg),
            format_size_auto(d.size),
            format_percentage(d.size, result.total_size),
            Text(display_name(d, cfg.name_width)),
        )
    console.print(table)

    console.print()
    console.print(f"Total: {format_size_auto(result.total_size)}")
    console.print(f"Files: {result.total_files}  Directories: {result.total_dirs}")
    if result.skipped:
        console.print(f"Skipped: {result.skipped} unreadable entries")
    if result.cancelled:
        console.print("Scan was cancelled; totals are partial")
    if cfg.show_filesystem:
        fs = filesystem_usage(result.root_path)
        if fs and fs["used"] > 0:
            mp = mountpoint_for(result.root_path) or result.root_path
            console.print(
                f"Filesystem {mp}: {format_size_auto(fs['used'])} used, "
                f"{format_percentage(result.total_size, fs['used']).strip()} of it under this path",
                markup=False,
            )

def printable_path(path: str) -> str:
    # undecodable filename bytes come back from the OS as lone surrogates
    return os.fsencode(path).decode("utf-8", "replace")

def result_to_dict(result: AnalysisResult) -> Dict[str, Any]:
    total = result.total_size
    return {
        "path": printable_path(result.root_path),
        "total_size": total,
        "total_size_human": format_size_auto(total),
        "file_count": result.total_files,
        "directory_count": result.total_dirs,
        "skipped": result.skipped,
        "top_directories": [
            {
                "path": printable_path(d.path),
                "size": d.size,
                "size_human": format_size_auto(d.size),
                "percentage": percentage(d.size, total),
                "file_count": d.file_count,
                "dir_count": d.dir_count,
            }
            for d in result.top_directories
        ],
    }

def print_json(result: AnalysisResult, file: Optional[TextIO] = None) -> None:
    out = file or sys.stdout
    out.write(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False))
    out.write("\n")
