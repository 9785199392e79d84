"""
search_after pagination for searchwalk.

This module provides the page data structures returned by search backends, and
the walkers that enumerate every matching document as a sequence of bounded
queries, carrying the last hit's sort values forward as the cursor.
"""

from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ._logging import logger, redact_key
from .config import WalkOptions
from .cursor import decode_cursor
from .exceptions import PaginationOverrunError

if TYPE_CHECKING:
    from .backends.base import AsyncSearchBackend, SearchBackend
    from .base import Document
    from .query import Query

T = TypeVar("T", bound="Document")


@dataclass
class SearchHit(Generic[T]):
    """
    One result row.

    Attributes:
        content: The document
        sort_values: The query's sort specification evaluated on this row
        id: The document id
    """

    content: T
    sort_values: list[Any]
    id: Any = None


@dataclass
class SearchPage(Generic[T]):
    """
    One bounded, ordered batch of hits returned by a single search call.
    An empty page ends a walk.
    """

    hits: list[SearchHit[T]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.hits)

    def __iter__(self) -> Iterator[SearchHit[T]]:
        return iter(self.hits)

    @property
    def count(self) -> int:
        return len(self.hits)

    @property
    def is_empty(self) -> bool:
        return not self.hits

    @property
    def contents(self) -> list[T]:
        return [hit.content for hit in self.hits]

    @property
    def last_sort_values(self) -> list[Any] | None:
        """The cursor for the next page (None for an empty page)."""
        if not self.hits:
            return None
        return list(self.hits[-1].sort_values)


class _WalkState:
    """Cursor and counters of one walk. Never shared between walks."""

    def __init__(self, query: "Query", index_name: str, options: WalkOptions) -> None:
        self.base_query = query
        self.index_name = index_name
        self.options = options
        self.cursor: list[Any] | None = query.search_after
        self.iteration = 0
        self.hits = 0

    def next_query(self) -> "Query":
        query = self.base_query.with_search_after(self.cursor)
        logger.debug(
            "Requesting page",
            extra={
                "index": self.index_name,
                "operation": "search",
                "page_size": query.page_size,
                "has_cursor": self.cursor is not None,
                "cursor_hash": redact_key(self.cursor),
            },
        )
        return query

    def advance(self, page: SearchPage[Any]) -> bool:
        """
        Accounts for a received page. Returns False when the walk is over.

        Raises:
            PaginationOverrunError: the page exceeds the iteration cap
        """
        if page.is_empty:
            logger.info(
                "Walk finished",
                extra={
                    "index": self.index_name,
                    "operation": "walk",
                    "iteration": self.iteration,
                    "hits": self.hits,
                },
            )
            return False

        self.iteration += 1
        if self.iteration > self.options.max_iterations:
            logger.warning(
                "Walk exceeded its iteration cap",
                extra={
                    "index": self.index_name,
                    "operation": "walk",
                    "max_iterations": self.options.max_iterations,
                    "cursor_hash": redact_key(self.cursor),
                },
            )
            raise PaginationOverrunError(self.options.max_iterations, index_name=self.index_name)

        self.hits += len(page)
        self.cursor = page.last_sort_values
        logger.debug(
            "Page received",
            extra={
                "index": self.index_name,
                "operation": "walk",
                "iteration": self.iteration,
                "hits": len(page),
            },
        )
        return True


class _BaseWalker(Generic[T]):
    def __init__(
        self,
        document_cls: type[T],
        max_iterations: int | None = None,
        options: WalkOptions | None = None,
    ) -> None:
        self.document_cls = document_cls
        if options is None:
            options = WalkOptions()
        if max_iterations is not None:
            options = replace(options, max_iterations=max_iterations)
        self.options = options

    def _start(self, base_query: "Query") -> _WalkState:
        # Rejected here, before the first backend call
        base_query.validate(self.document_cls)
        index_name = self.document_cls.index_name()
        logger.info(
            "Starting search_after walk",
            extra={
                "index": index_name,
                "operation": "walk",
                "page_size": base_query.page_size,
                "sort": [s.export() for s in base_query.sort],
                "has_cursor": base_query.search_after is not None,
            },
        )
        return _WalkState(base_query, index_name, self.options)

    @staticmethod
    def _resume_query(base_query: "Query", token: str) -> "Query":
        return base_query.with_search_after(decode_cursor(token, base_query.sort))


class PaginationWalker(_BaseWalker[T]):
    """
    Enumerates every document matching a query, in sort order, as a sequence
    of bounded search calls.

    The walk starts at base_query.search_after (normally absent: the first
    page) and stops at the first empty page. Each walk is single-pass; calling
    walk_all() again starts a fresh cursor.

    Usage:
        walker = PaginationWalker(backend, Message, max_iterations=100)
        query = Query.find_all(page_size=3).add_sort("id")
        for message in walker.walk_all(query):
            ...
    """

    def __init__(
        self,
        backend: "SearchBackend",
        document_cls: type[T],
        max_iterations: int | None = None,
        options: WalkOptions | None = None,
    ) -> None:
        super().__init__(document_cls, max_iterations, options)
        self.backend = backend

    def pages(self, base_query: "Query") -> Iterator[SearchPage[T]]:
        """
        Lazily yields every non-empty page of the walk.

        Raises:
            InvalidQueryError: immediately, if the query cannot be paginated
            PaginationOverrunError: when the iteration cap is exceeded
            BackendUnavailableError: when a search call fails
        """
        return self._walk(self._start(base_query))

    def _walk(self, state: _WalkState) -> Iterator[SearchPage[T]]:
        while True:
            page = self.backend.search(state.next_query(), self.document_cls)
            if not state.advance(page):
                return
            yield page

    def walk_all(self, base_query: "Query") -> Iterator[T]:
        """Lazily yields every matching document, in sort order."""
        pages = self.pages(base_query)
        return (document for page in pages for document in page.contents)

    def all(self, base_query: "Query") -> list[T]:
        """
        Executes the whole walk and consumes it into a list.
        WARNING: Can consume high memory for large datasets.
        """
        return list(self.walk_all(base_query))

    def resume(self, base_query: "Query", token: str) -> Iterator[T]:
        """Continues a walk from an opaque cursor token (see searchwalk.cursor)."""
        return self.walk_all(self._resume_query(base_query, token))


class AsyncPaginationWalker(_BaseWalker[T]):
    """
    The same walk over an AsyncSearchBackend.
    Each page is awaited before the next query is issued.

    Usage:
        async for message in AsyncPaginationWalker(backend, Message).walk_all(query):
            ...
    """

    def __init__(
        self,
        backend: "AsyncSearchBackend",
        document_cls: type[T],
        max_iterations: int | None = None,
        options: WalkOptions | None = None,
    ) -> None:
        super().__init__(document_cls, max_iterations, options)
        self.backend = backend

    def pages(self, base_query: "Query") -> AsyncIterator[SearchPage[T]]:
        return self._walk(self._start(base_query))

    async def _walk(self, state: _WalkState) -> AsyncIterator[SearchPage[T]]:
        while True:
            page = await self.backend.search(state.next_query(), self.document_cls)
            if not state.advance(page):
                return
            yield page

    def walk_all(self, base_query: "Query") -> AsyncIterator[T]:
        return self._contents(self.pages(base_query))

    @staticmethod
    async def _contents(pages: AsyncIterator[SearchPage[T]]) -> AsyncIterator[T]:
        async for page in pages:
            for document in page.contents:
                yield document

    async def all(self, base_query: "Query") -> list[T]:
        return [document async for document in self.walk_all(base_query)]

    def resume(self, base_query: "Query", token: str) -> AsyncIterator[T]:
        return self.walk_all(self._resume_query(base_query, token))

