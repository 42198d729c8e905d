from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .errors import DutopError, PathNotFoundError
from .models import AnalysisConfig
from .output import OutputConfig, print_json, print_results
from .scanner import DEFAULT_TOP_N, analyze_disk_usage

logger = logging.getLogger("dutop")

LOG_ENV = "DUTOP_LOG"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PERMISSION = 3
EXIT_NOT_FOUND = 4
EXIT_IO = 5
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dutop", description="Analyze disk usage and display top directories")
    p.add_argument("path", nargs="?", default=".", help="Directory to analyze (default: current directory)")
    p.add_argument("-n", "--top", type=int, default=DEFAULT_TOP_N, help="Number of top directories to display")
    p.add_argument("-d", "--depth", type=int, default=None, help="Maximum depth to traverse (default: unlimited)")
    p.add_argument("-x", "--exclude", action="append", default=[], metavar="PATTERN",
                   help="Exclude entries whose name matches this glob (repeatable)")
    p.add_argument("-L", "--follow-links", action="store_true", help="Follow symbolic links")
    p.add_argument("-j", "--threads", type=int, default=None, help="Number of threads to use (default: auto-detect)")
    p.add_argument("-f", "--format", choices=["human", "json"], default="human", help="Output format")
    p.add_argument("--no-color", action="store_true", help="Disable colored output")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p


def init_logging(verbose: bool = False, debug: bool = False) -> int:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    env = os.environ.get(LOG_ENV)
    if env:
        lvl = logging.getLevelName(env.strip().upper())
        if isinstance(lvl, int):
            level = lvl
    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)
    return level


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(args.verbose, args.debug)
    logger.debug("Starting dutop with args: %s", args)

    try:
        path = Path(args.path).expanduser().resolve(strict=True)
    except FileNotFoundError:
        raise PathNotFoundError(str(args.path)) from None
    logger.info("Analyzing path: %s", path)

    config = AnalysisConfig(
        max_depth=args.depth,
        exclude_patterns=tuple(args.exclude),
        follow_links=args.follow_links,
        num_threads=args.threads,
    )
    result = analyze_disk_usage(path, config, max(0, args.top))

    if args.format == "json":
        print_json(result)
    else:
        print_results(result, OutputConfig(
            use_colors=not args.no_color and sys.stdout.isatty(),
            show_filesystem=args.verbose or args.debug,
        ))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    try:
        code = run(argv)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        code = EXIT_INTERRUPTED
    except PathNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = EXIT_NOT_FOUND
    except DutopError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = EXIT_ERROR
    except PermissionError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = EXIT_PERMISSION
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = EXIT_IO
    return code


if __name__ == "__main__":
    raise SystemExit(main())
