"""Argument serialization strategies used to build cache keys.

A serializer turns the bound positional and keyword arguments of one call
into text. Equal arguments must always produce equal text. A serializer that
meets a value it cannot encode raises :class:`KeyCompositionError`.
"""

from __future__ import annotations

import base64
import json
import pickle
from typing import Any, Mapping, Protocol

from pydantic_core import PydanticSerializationError, to_jsonable_python

from .exceptions import KeyCompositionError


class ArgumentSerializer(Protocol):
    def __call__(
        self, operation: str, args: tuple[Any, ...], kwargs: Mapping[str, Any]
    ) -> str: ...


def _canonical(value: Any) -> str:
    return json.dumps(_stringify_keys(to_jsonable_python(value)), sort_keys=True)


def _order_sets(value: Any) -> Any:
    # set iteration order depends on insertion history and hash seeds
    if isinstance(value, (set, frozenset)):
        return sorted((_order_sets(v) for v in value), key=_canonical)
    if isinstance(value, dict):
        return {k: _order_sets(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_order_sets(v) for v in value]
    return value


def _stringify_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _stringify_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_keys(v) for v in value]
    return value


class JsonArgumentSerializer:
    """Encode arguments as canonical JSON through pydantic-core.

    Handles builtins, pydantic models, dataclasses, enums, ``Decimal``,
    datetimes, UUIDs and paths. Sets are emitted as sorted lists. Anything
    else raises :class:`KeyCompositionError`.

    The encoding does not record Python types: tuples and lists, ``Decimal("1")``
    and ``"1"``, ``b"x"`` and ``"x"`` all encode alike, so calls differing only
    in argument type share a key. Use :class:`PickleArgumentSerializer` when
    that matters.
    """

    def __call__(
        self, operation: str, args: tuple[Any, ...], kwargs: Mapping[str, Any]
    ) -> str:
        payload = {"args": list(args), "kwargs": dict(kwargs)}
        try:
            jsonable = to_jsonable_python(_order_sets(payload))
            return json.dumps(
                _stringify_keys(jsonable),
                sort_keys=True,
                separators=(",", ":"),
                ensure_ascii=False,
            )
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise KeyCompositionError(operation, str(exc)) from exc


class PickleArgumentSerializer:
    """Encode arguments with pickle, the generic Python object-graph encoding.

    Covers far more types than JSON but equal objects are not guaranteed to
    pickle to equal bytes (e.g. dicts built in a different insertion order).
    """

    def __init__(self, protocol: int = 4):
        self.protocol = protocol

    def __call__(
        self, operation: str, args: tuple[Any, ...], kwargs: Mapping[str, Any]
    ) -> str:
        payload = (tuple(args), sorted(kwargs.items()))
        try:
            raw = pickle.dumps(payload, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise KeyCompositionError(operation, str(exc)) from exc
        return base64.b64encode(raw).decode("ascii")
