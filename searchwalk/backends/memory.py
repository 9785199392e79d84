from collections.abc import Sequence
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any, TypeVar
from uuid import uuid4

from .._logging import logger, redact_key
from ..exceptions import InvalidQueryError
from ..pagination import SearchHit, SearchPage
from ..query import SortDirection

if TYPE_CHECKING:
    from ..base import Document
    from ..query import Query, SortField

T = TypeVar("T", bound="Document")


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison of two sort values. Missing values (None) sort last."""
    if left is None and right is None:
        return 0
    if left is None:
        return 1
    if right is None:
        return -1
    return (left > right) - (left < right)


def compare_sort_values(
    left: Sequence[Any], right: Sequence[Any], sort: "Sequence[SortField]"
) -> int:
    """Compares two sort-value tuples under a sort specification."""
    for left_val, right_val, sort_field in zip(left, right, sort):
        result = compare_values(left_val, right_val)
        # Missing values stay last in both directions
        if sort_field.direction is SortDirection.DESC and None not in (left_val, right_val):
            result = -result
        if result:
            return result
    return 0


class InMemorySearchBackend:
    """
    A deterministic search backend keeping documents in process memory.

    Documents are stored as plain dicts, per index, so later changes to the
    indexed instances do not leak into search results.
    """

    def __init__(self) -> None:
        self._indices: dict[str, dict[Any, dict[str, Any]]] = {}

    def index_entities(self, entities: "Sequence[Document]") -> None:
        for entity in entities:
            index = self._indices.setdefault(entity.index_name(), {})
            doc_id = entity.get_id()
            # Like a search engine, generate a storage id for documents without one
            index[doc_id if doc_id is not None else uuid4().hex] = entity.to_source()

        logger.info(
            "Documents indexed",
            extra={"operation": "index", "backend": "memory", "count": len(entities)},
        )

    def count(self, document_cls: "type[Document]") -> int:
        return len(self._indices.get(document_cls.index_name(), {}))

    def search(self, query: "Query", document_cls: type[T]) -> SearchPage[T]:
        query.validate(document_cls)
        index_name = document_cls.index_name()

        logger.debug(
            "Executing search",
            extra={
                "index": index_name,
                "operation": "search",
                "backend": "memory",
                "page_size": query.page_size,
                "has_cursor": query.search_after is not None,
                "cursor_hash": redact_key(query.search_after),
            },
        )

        documents = [
            document_cls.from_source(source)
            for source in self._indices.get(index_name, {}).values()
        ]
        if query.criteria:
            documents = [
                doc
                for doc in documents
                if all(getattr(doc, name) == value for name, value in query.criteria.items())
            ]

        rows = [(doc, doc.sort_values(query.sort)) for doc in documents]
        try:
            rows.sort(key=cmp_to_key(lambda a, b: compare_sort_values(a[1], b[1], query.sort)))
            if query.search_after is not None:
                rows = [
                    row
                    for row in rows
                    if compare_sort_values(row[1], query.search_after, query.sort) > 0
                ]
        except TypeError as e:
            raise InvalidQueryError(
                f"Sort values are not comparable: {e!s}",
                value=query.search_after,
                original_error=e,
            ) from e

        return SearchPage(
            hits=[
                SearchHit(content=doc, sort_values=values, id=doc.get_id())
                for doc, values in rows[: query.page_size]
            ]
        )
