"""
The search backend collaborator.

A walker depends on a single backend operation, search(); index_entities() is
the bulk write used to load documents.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from ..base import Document
    from ..pagination import SearchPage
    from ..query import Query

T = TypeVar("T", bound="Document")


class SearchBackend(Protocol):
    def index_entities(self, entities: "Sequence[Document]") -> None:
        """Stores documents in the index of their class. Existing ids are overwritten."""
        ...

    def search(self, query: "Query", document_cls: type[T]) -> "SearchPage[T]":
        """
        Returns one page of hits for a query.

        Must apply the filter, sort deterministically, return at most
        query.page_size hits, and, when query.search_after is set, only
        return hits strictly after it in sort order.

        Raises:
            BackendUnavailableError: the call did not complete
            InvalidQueryError: the backend cannot serve this query
        """
        ...


class AsyncSearchBackend(Protocol):
    async def index_entities(self, entities: "Sequence[Document]") -> None: ...

    async def search(self, query: "Query", document_cls: type[T]) -> "SearchPage[T]": ...
