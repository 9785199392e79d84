from .base import AsyncSearchBackend, SearchBackend
from .dynamo import DynamoSearchBackend
from .memory import InMemorySearchBackend
from .threaded import ThreadedAsyncBackend

__all__ = [
    "SearchBackend",
    "AsyncSearchBackend",
    "InMemorySearchBackend",
    "DynamoSearchBackend",
    "ThreadedAsyncBackend",
]
