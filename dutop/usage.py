from __future__ import annotations
import os

BLOCK_SIZE = 512  # st_blocks is always counted in 512-byte units


class BlockUsage:
    """Allocated size, like du: sparse and compressed files count what they occupy."""

    def usage_bytes(self, st: os.stat_result) -> int:
        blocks = getattr(st, "st_blocks", None)
        if blocks is None:
            return int(st.st_size)
        return int(blocks) * BLOCK_SIZE


class ApparentUsage:
    def usage_bytes(self, st: os.stat_result) -> int:
        return int(st.st_size)


def default_usage():
    # Windows stat has no block count; the logical length is the best we get there
    if os.name == "posix":
        return BlockUsage()
    return ApparentUsage()
