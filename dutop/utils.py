from __future__ import annotations

BINARY = "binary"
SI = "si"

_UNITS = {
    BINARY: (1024.0, ["B", "K", "M", "G", "T", "P"]),
    SI: (1000.0, ["B", "KB", "MB", "GB", "TB", "PB"]),
}

def format_size(num: int, unit_system: str = BINARY, precision: int = 1) -> str:
    base, units = _UNITS[unit_system]
    if num <= 0:
        return f"{num} B" if num < 0 else "0 B"
    x = float(num)
    i = 0
    while x >= base and i < len(units) - 1:
        x /= base
        i += 1
    if i == 0:
        return f"{num} {units[0]}"
    return f"{x:.{precision}f} {units[i]}"

def format_size_auto(num: int) -> str:
    return format_size(num, BINARY, 1)

def format_percentage(part: int, total: int) -> str:
    if total <= 0:
        return "0%"
    return f"{part / total * 100.0:>3.0f}%"

def percentage(part: int, total: int) -> float:
    return part / total * 100.0 if total > 0 else 0.0

def clamp(v, lo, hi):
    return lo if v < lo else hi if v > hi else v
