from __future__ import annotations

from .operations import OperationCall
from .serializers import ArgumentSerializer, JsonArgumentSerializer


def type_identity(delegate: object) -> str:
    cls = type(delegate)
    return f"{cls.__module__}.{cls.__qualname__}"


class DefaultKeyComposer:
    """Compose ``<module>.<Type>.<operation>[:<serialized arguments>]`` keys.

    The argument part is only present when the call binds any arguments,
    defaults included. It is produced by the configured serializer from the
    bound arguments, so positional, keyword and defaulted spellings of the
    same call share a key.
    """

    TYPE_SEPARATOR = "."
    ARGS_SEPARATOR = ":"

    def __init__(self, serializer: ArgumentSerializer | None = None):
        self.serializer = serializer or JsonArgumentSerializer()

    def __call__(self, delegate: object, call: OperationCall) -> str:
        name = call.operation.name
        key = f"{type_identity(delegate)}{self.TYPE_SEPARATOR}{name}"
        args, kwargs = call.bound_arguments()
        if not (args or kwargs):
            return key
        serialized = self.serializer(name, args, kwargs)
        return f"{key}{self.ARGS_SEPARATOR}{serialized}"
