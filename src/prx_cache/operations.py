from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping


@dataclass(frozen=True)
class Operation:
    name: str
    signature: inspect.Signature | None = field(default=None, compare=False)
    is_coroutine: bool = field(default=False, compare=False)

    @classmethod
    def from_callable(cls, name: str, func: Callable[..., Any]) -> Operation:
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            # builtins and some C extensions cannot be introspected
            signature = None
        return cls(
            name=name,
            signature=signature,
            is_coroutine=inspect.iscoroutinefunction(func),
        )


@dataclass(frozen=True)
class OperationCall:
    operation: Operation
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)

    @property
    def has_arguments(self) -> bool:
        """Whether the caller passed anything; defaults are not considered."""
        return bool(self.args or self.kwargs)

    def bound_arguments(self) -> tuple[tuple[Any, ...], dict[str, Any]]:
        """Return ``(args, kwargs)`` normalised against the operation signature.

        Arguments passed by keyword that could have been passed positionally
        are moved into ``args`` and defaults are applied, so ``f(1)``,
        ``f(x=1)`` and ``f()`` (when ``x`` defaults to 1) all bind the same.
        Calls that do not match the signature are returned as given; the
        delegate will reject them itself.
        """
        signature = self.operation.signature
        if signature is None:
            return tuple(self.args), dict(self.kwargs)
        try:
            bound = signature.bind(*self.args, **self.kwargs)
        except TypeError:
            return tuple(self.args), dict(self.kwargs)
        bound.apply_defaults()
        return tuple(bound.args), dict(bound.kwargs)
