from __future__ import annotations
import fnmatch
import re
from typing import Callable, Iterable, List

from .errors import ConfigError

Matcher = Callable[[str], bool]


def _never(_name: str) -> bool:
    return False


def _check_syntax(pattern: str) -> None:
    # fnmatch quietly treats a broken class as a literal; reject it instead
    if not pattern:
        raise ConfigError("Invalid glob pattern: empty pattern")
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                raise ConfigError(f"Invalid glob pattern: {pattern} (unclosed character class)")
            i = j + 1
            continue
        if c == "*" and pattern.startswith("**", i):
            # recursive wildcard only as a whole component, as in `**` or `a/**/b`
            before_ok = i == 0 or pattern[i - 1] == "/"
            after_ok = i + 2 == n or pattern[i + 2] == "/"
            if not (before_ok and after_ok):
                raise ConfigError(f"Invalid glob pattern: {pattern} (`**` must be a whole path component)")
            i += 2
            continue
        i += 1


def build_exclusion_matcher(patterns: Iterable[str]) -> Matcher:
    """Compile glob patterns into a predicate over a path's final component."""
    patterns = list(patterns or ())
    if not patterns:
        return _never

    compiled: List[re.Pattern] = []
    for p in patterns:
        _check_syntax(p)
        try:
            compiled.append(re.compile(fnmatch.translate(p)))
        except re.error as e:
            raise ConfigError(f"Invalid glob pattern: {p} ({e})") from e

    def excluded(name: str) -> bool:
        return any(rx.match(name) for rx in compiled)

    return excluded
