"""Error taxonomy for the progression engine."""

from __future__ import annotations


class ProgressionError(Exception):
    """Base class for all progression engine errors."""


class StorageError(ProgressionError):
    """A key-value backend failed to read or write a namespace."""

    def __init__(self, namespace: str, message: str) -> None:
        super().__init__(f"{namespace}: {message}")
        self.namespace = namespace


class HydrationError(ProgressionError):
    """A persisted blob is malformed or does not match the expected shape."""


class ProgressionNotLoadedError(ProgressionError):
    """The context was queried before persisted state was hydrated."""


class UnknownTrackError(ProgressionError, ValueError):
    """A module completion referenced a curriculum track that does not exist."""

    def __init__(self, track: str) -> None:
        super().__init__(f"Unknown curriculum track: {track!r}")
        self.track = track
