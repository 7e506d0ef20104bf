"""Error taxonomy for dummy source synthesis."""

from __future__ import annotations

from pathlib import Path


class DummySrcError(RuntimeError):
    """Base error that always identifies the offending path."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = str(path)
        super().__init__(f"{self.path}: {message}")


class TraversalError(DummySrcError):
    """Raised when the source tree (or a directory within it) cannot be read."""


class ManifestFormatError(DummySrcError):
    """Raised when a single manifest cannot be parsed or has an invalid shape."""


class PathCollisionError(DummySrcError):
    """Raised when two generated outputs resolve to the same path."""

    def __init__(self, path: str | Path, first: str, second: str) -> None:
        self.first = first
        self.second = second
        super().__init__(path, f"generated by both {first} and {second}")


__all__ = [
    "DummySrcError",
    "ManifestFormatError",
    "PathCollisionError",
    "TraversalError",
]
