from __future__ import annotations

from typing import Iterable

from .operations import OperationCall


class NamedOperationsPolicy:
    """Cache the operations named at construction; an empty set caches all."""

    def __init__(self, names: Iterable[str] = ()):
        self._names = frozenset(names)

    @property
    def names(self) -> frozenset[str]:
        return self._names

    @property
    def caches_everything(self) -> bool:
        return not self._names

    def __call__(self, delegate: object, call: OperationCall) -> bool:
        return self.caches_everything or call.operation.name in self._names
