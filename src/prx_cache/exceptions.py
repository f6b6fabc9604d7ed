from __future__ import annotations


class CachingError(Exception):
    """Base class for failures raised by the caching layer itself.

    Exceptions raised by a wrapped delegate never derive from this class;
    they reach the caller unchanged.
    """


class KeyCompositionError(CachingError):
    """Arguments of a call could not be turned into a cache key."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Cannot compose cache key for {operation!r}: {reason}")
