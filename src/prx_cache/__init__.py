from .cache import CacheStore, EligibilityPolicy, FailureHook, KeyComposer
from .config import Config
from .db import DuckDbStore
from .eligibility import NamedOperationsPolicy
from .exceptions import CachingError, KeyCompositionError
from .interceptor import (
    CacheStats,
    CachingProxy,
    Interceptor,
    interceptor_of,
    wrap,
)
from .keys import DefaultKeyComposer
from .operations import Operation, OperationCall
from .serializers import JsonArgumentSerializer, PickleArgumentSerializer
from .stores import HashMapStore

__all__ = [
    "CacheStats",
    "CacheStore",
    "CachingError",
    "CachingProxy",
    "Config",
    "DefaultKeyComposer",
    "DuckDbStore",
    "EligibilityPolicy",
    "FailureHook",
    "HashMapStore",
    "Interceptor",
    "JsonArgumentSerializer",
    "KeyComposer",
    "KeyCompositionError",
    "NamedOperationsPolicy",
    "Operation",
    "OperationCall",
    "PickleArgumentSerializer",
    "interceptor_of",
    "wrap",
]
