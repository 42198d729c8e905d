from __future__ import annotations


class DutopError(Exception):
    """Base class for errors that stop an analysis before it starts."""


class ConfigError(DutopError, ValueError):
    pass


class PathNotFoundError(DutopError, FileNotFoundError):
    def __init__(self, path: str):
        super().__init__(f"Path does not exist: {path}")
        self.path = path


class RootNotDirectoryError(DutopError, NotADirectoryError):
    def __init__(self, path: str):
        super().__init__(f"Path is not a directory: {path}")
        self.path = path


class ThreadPoolError(DutopError, RuntimeError):
    pass
