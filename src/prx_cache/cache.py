from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

from .operations import OperationCall


@runtime_checkable
class CacheStore(Protocol):
    """Minimal key-value store consulted and populated by the interceptor."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class KeyComposer(Protocol):
    """Derives the cache key for one call on a delegate."""

    def __call__(self, delegate: object, call: OperationCall) -> str: ...


class EligibilityPolicy(Protocol):
    """Decides whether a call on a delegate goes through the cache."""

    def __call__(self, delegate: object, call: OperationCall) -> bool: ...


FailureHook = Callable[[Exception], None]
