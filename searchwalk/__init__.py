from .backends import (
    AsyncSearchBackend,
    DynamoSearchBackend,
    InMemorySearchBackend,
    SearchBackend,
    ThreadedAsyncBackend,
)
from .base import Document
from .config import DEFAULT_MAX_ITERATIONS, WalkOptions
from .cursor import decode_cursor, encode_cursor
from .exceptions import (
    BackendThrottledError,
    BackendTimeoutError,
    BackendUnavailableError,
    DocumentSerializationError,
    IndexNotFoundError,
    InvalidQueryError,
    PaginationOverrunError,
    SearchWalkError,
)
from .fields import DocField, FieldType, Id
from .pagination import AsyncPaginationWalker, PaginationWalker, SearchHit, SearchPage
from .query import Query, SortDirection, SortField

__all__ = [
    "Document",
    "Id",
    "DocField",
    "FieldType",
    # Queries
    "Query",
    "SortField",
    "SortDirection",
    # Pagination
    "PaginationWalker",
    "AsyncPaginationWalker",
    "SearchHit",
    "SearchPage",
    "WalkOptions",
    "DEFAULT_MAX_ITERATIONS",
    "encode_cursor",
    "decode_cursor",
    # Backends
    "SearchBackend",
    "AsyncSearchBackend",
    "InMemorySearchBackend",
    "DynamoSearchBackend",
    "ThreadedAsyncBackend",
    # Exceptions
    "SearchWalkError",
    "BackendUnavailableError",
    "IndexNotFoundError",
    "BackendThrottledError",
    "BackendTimeoutError",
    "PaginationOverrunError",
    "InvalidQueryError",
    "DocumentSerializationError",
]
