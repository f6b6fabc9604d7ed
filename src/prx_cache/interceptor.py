from __future__ import annotations

import functools
import logging
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from pydantic import BaseModel, Field

from .cache import CacheStore, EligibilityPolicy, FailureHook, KeyComposer
from .config import Config
from .eligibility import NamedOperationsPolicy
from .keys import DefaultKeyComposer
from .operations import Operation, OperationCall


logger = logging.getLogger(__name__)

SOURCE_UNINITIALIZED = "uninitialized"
SOURCE_CACHE = "cache"
SOURCE_DELEGATE = "delegate"


class CacheStats(BaseModel):
    hits: int = Field(0, description="Calls answered from the store")
    misses: int = Field(0, description="Cacheable calls forwarded to the delegate")
    bypassed: int = Field(0, description="Calls that skipped the cache entirely")
    read_errors: int = Field(0, description="Store reads that raised")
    write_errors: int = Field(0, description="Store writes that raised")

    def to_dict(self) -> dict[str, int]:
        return self.model_dump()


def log_store_error(exc: Exception) -> None:
    logger.warning("Cache store write failed, result not cached: %s", exc)


@dataclass(frozen=True)
class _Lookup:
    key: str | None = None
    value: Any = None

    @property
    def cacheable(self) -> bool:
        return self.key is not None


class Interceptor:
    """Cache-first call routing for every operation of a delegate.

    Each call asks the eligibility policy whether it is cached. Cached calls
    get a key from the key composer and are answered from the store when it
    holds a value; otherwise the delegate runs and its result is offered to
    the store. Store write failures go to ``on_store_error`` and never reach
    the caller. Delegate exceptions are never caught.

    A ``None`` value in the store counts as a miss, so ``None`` results are
    effectively never cached.
    """

    def __init__(
        self,
        delegate: object,
        store: CacheStore,
        *,
        eligible: Iterable[str] = (),
        key_composer: KeyComposer | None = None,
        eligibility: EligibilityPolicy | None = None,
        on_store_error: FailureHook | None = None,
        config: Config | None = None,
    ):
        eligible = frozenset(eligible)
        if eligibility is not None and eligible:
            raise ValueError("Pass either eligible names or an eligibility policy")

        self._delegate = delegate
        self._store = store
        self._config = config or Config()
        self._key_composer: KeyComposer = key_composer or DefaultKeyComposer()
        self._eligibility: EligibilityPolicy = eligibility or NamedOperationsPolicy(
            eligible
        )
        self._on_store_error: FailureHook = on_store_error or log_store_error
        self._operations: dict[str, tuple[object, Operation]] = {}
        self._stats = CacheStats()
        self._last_response_source = SOURCE_UNINITIALIZED

    @property
    def delegate(self) -> object:
        return self._delegate

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def config(self) -> Config:
        return self._config

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def last_response_source(self) -> str:
        return self._last_response_source

    def operation(
        self, name: str, method: Callable[..., Any] | None = None
    ) -> Operation:
        """Return the operation for ``name``.

        Rebuilt whenever the delegate attribute no longer resolves to the
        function it was built from, so reassigned methods bind against their
        own signature.
        """
        if method is None:
            method = getattr(self._delegate, name)
        source = getattr(method, "__func__", method)
        cached = self._operations.get(name)
        if cached is not None and cached[0] is source:
            return cached[1]
        operation = Operation.from_callable(name, method)
        self._operations[name] = (source, operation)
        return operation

    def invoke(self, call: OperationCall) -> Any:
        lookup = self._lookup(call)
        if lookup.value is not None:
            return lookup.value

        method = getattr(self._delegate, call.operation.name)
        self._last_response_source = SOURCE_DELEGATE
        value = method(*call.args, **call.kwargs)

        if lookup.cacheable:
            self._populate(lookup.key, value)
        return value

    async def ainvoke(self, call: OperationCall) -> Any:
        lookup = self._lookup(call)
        if lookup.value is not None:
            return lookup.value

        method = getattr(self._delegate, call.operation.name)
        self._last_response_source = SOURCE_DELEGATE
        value = await method(*call.args, **call.kwargs)

        if lookup.cacheable:
            self._populate(lookup.key, value)
        return value

    def bind(self, name: str, method: Callable[..., Any]) -> Callable[..., Any]:
        """Return a callable that routes calls of ``name`` through this interceptor."""
        operation = self.operation(name, method)

        if operation.is_coroutine:

            async def routed_async(*args, **kwargs):
                return await self.ainvoke(OperationCall(operation, args, kwargs))

            return functools.update_wrapper(routed_async, method)

        def routed(*args, **kwargs):
            return self.invoke(OperationCall(operation, args, kwargs))

        return functools.update_wrapper(routed, method)

    def _lookup(self, call: OperationCall) -> _Lookup:
        name = call.operation.name
        if not self._eligibility(self._delegate, call):
            self._stats.bypassed += 1
            return _Lookup()

        try:
            key = self._key_composer(self._delegate, call)
        except Exception as exc:
            if not self._config.fail_open_on_key_error:
                raise
            logger.warning("Skipping cache for %s, no key: %s", name, exc)
            self._stats.bypassed += 1
            return _Lookup()

        try:
            cached = self._store.get(key)
        except Exception as exc:
            logger.warning(
                "Cache store read failed for %s, treating as miss: %s", name, exc
            )
            self._stats.read_errors += 1
            cached = None

        if cached is None:
            logger.debug("Cache miss for %s", key)
            self._stats.misses += 1
            return _Lookup(key=key)

        logger.debug("Cache hit for %s", key)
        self._stats.hits += 1
        self._last_response_source = SOURCE_CACHE
        return _Lookup(key=key, value=cached)

    def _populate(self, key: str, value: Any) -> None:
        if isinstance(value, (Iterator, AsyncIterator)):
            # a stored iterator would come back exhausted on every hit
            logger.debug("Not caching %s result for %s", type(value).__name__, key)
            self._stats.bypassed += 1
            return
        try:
            self._store.set(key, value)
        except Exception as exc:
            self._stats.write_errors += 1
            self._on_store_error(exc)


class CachingProxy:
    """Delegate-shaped view whose method calls go through an :class:`Interceptor`.

    Attribute reads are resolved on the delegate. Callables come back routed
    through the interceptor, anything else is returned as is. Attribute
    writes and deletes are applied to the delegate. Protocol methods such
    as ``__len__`` are added per delegate type by :func:`proxy_class_for`.
    """

    __slots__ = ("_prx_interceptor",)

    def __init__(self, interceptor: Interceptor):
        object.__setattr__(self, "_prx_interceptor", interceptor)

    def __getattr__(self, name: str) -> Any:
        interceptor: Interceptor = object.__getattribute__(self, "_prx_interceptor")
        attr = getattr(interceptor.delegate, name)
        if not callable(attr):
            return attr
        return interceptor.bind(name, attr)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "_prx_interceptor":
            raise AttributeError("cannot replace the interceptor of a cached view")
        setattr(interceptor_of(self).delegate, name, value)

    def __delattr__(self, name: str) -> None:
        if name == "_prx_interceptor":
            raise AttributeError("cannot remove the interceptor of a cached view")
        delattr(interceptor_of(self).delegate, name)

    def __dir__(self) -> list[str]:
        return dir(interceptor_of(self).delegate)

    def __repr__(self) -> str:
        return f"<CachingProxy for {interceptor_of(self).delegate!r}>"


def interceptor_of(proxy: CachingProxy) -> Interceptor:
    return object.__getattribute__(proxy, "_prx_interceptor")


# implicit protocol calls look these up on the type, never through __getattr__
PROTOCOL_METHODS = (
    "__call__",
    "__len__",
    "__bool__",
    "__getitem__",
    "__setitem__",
    "__delitem__",
    "__contains__",
    "__iter__",
    "__reversed__",
    "__aiter__",
)


def _defines(cls: type, name: str) -> bool:
    for klass in cls.__mro__:
        if name in vars(klass):
            return vars(klass)[name] is not None
    return False


def _forward(name: str) -> Callable[..., Any]:
    def forward(self, *args, **kwargs):
        interceptor = interceptor_of(self)
        method = getattr(interceptor.delegate, name)
        return interceptor.bind(name, method)(*args, **kwargs)

    forward.__name__ = name
    forward.__qualname__ = f"CachingProxy.{name}"
    return forward


@functools.lru_cache(maxsize=None)
def proxy_class_for(cls: type) -> type[CachingProxy]:
    """Return the proxy class for delegates of type ``cls``.

    Protocol methods defined by ``cls`` (``len()``, ``view[k]``, ``view()``
    and friends) get forwarders on a generated subclass, routed like any
    other operation. Types without them share :class:`CachingProxy`.
    """
    forwarded = {
        name: _forward(name) for name in PROTOCOL_METHODS if _defines(cls, name)
    }
    if not forwarded:
        return CachingProxy
    namespace: dict[str, Any] = {"__slots__": (), **forwarded}
    return type(f"CachingProxy[{cls.__qualname__}]", (CachingProxy,), namespace)


def wrap(
    delegate: Any,
    store: CacheStore,
    eligible: Iterable[str] | None = None,
    *,
    key_composer: KeyComposer | None = None,
    eligibility: EligibilityPolicy | None = None,
    on_store_error: FailureHook | None = None,
    config: Config | None = None,
) -> Any:
    """Return a cached view of ``delegate`` backed by ``store``.

    delegate
        Object whose methods are cached. It is not copied or modified.
    store
        Anything with ``get(key)`` and ``set(key, value)``.
    eligible
        Names of the methods to cache. ``None`` or empty caches every method.
    key_composer, eligibility, on_store_error
        Replacement strategies for key derivation, the per-call caching
        decision and store write failure handling.
    """
    interceptor = Interceptor(
        delegate,
        store,
        eligible=eligible or (),
        key_composer=key_composer,
        eligibility=eligibility,
        on_store_error=on_store_error,
        config=config,
    )
    return proxy_class_for(type(delegate))(interceptor)
