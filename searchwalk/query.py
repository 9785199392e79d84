"""
Search query description.

A Query is an immutable value: every builder method returns a modified copy,
so a walk can derive the query for the next page from the base query without
touching the caller's instance.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidQueryError

if TYPE_CHECKING:
    from .base import Document


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortField:
    """One (field, direction) pair of a sort specification."""

    field: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def asc(cls, field_name: str) -> "SortField":
        return cls(field_name, SortDirection.ASC)

    @classmethod
    def desc(cls, field_name: str) -> "SortField":
        return cls(field_name, SortDirection.DESC)

    def export(self) -> str:
        """Compact form used in cursor tokens: 'id+' / 'id-'"""
        return self.field + ("+" if self.direction is SortDirection.ASC else "-")


@dataclass(frozen=True)
class Query:
    """
    One backend request.

    Attributes:
        criteria: Equality filter {field: value}. None matches all documents.
        page_size: Maximum number of hits per page.
        sort: Sort specification. Must be non-empty and end in a unique field.
        search_after: Sort values of the last seen hit. None requests the first page.
    """

    criteria: dict[str, Any] | None = field(default=None, hash=False)
    page_size: int = 10
    sort: tuple[SortField, ...] = ()
    search_after: list[Any] | None = field(default=None, hash=False)

    # --- CONSTRUCTORS ---

    @classmethod
    def find_all(cls, page_size: int = 10) -> "Query":
        """A match-all query."""
        return cls(criteria=None, page_size=page_size)

    # --- BUILDER INTERFACE ---

    def where(self, **criteria: Any) -> "Query":
        """Adds equality conditions. Multiple calls are combined with AND."""
        merged = {**(self.criteria or {}), **criteria}
        return replace(self, criteria=merged)

    def with_page_size(self, page_size: int) -> "Query":
        return replace(self, page_size=page_size)

    def add_sort(
        self, field_name: str, direction: SortDirection | str = SortDirection.ASC
    ) -> "Query":
        """Appends a sort field. Earlier fields take precedence."""
        return replace(self, sort=(*self.sort, SortField(field_name, SortDirection(direction))))

    def sorted_by(self, *sort: SortField) -> "Query":
        """Replaces the whole sort specification."""
        return replace(self, sort=tuple(sort))

    def with_search_after(self, values: Sequence[Any] | None) -> "Query":
        """Returns a copy that starts strictly after the given sort values."""
        return replace(self, search_after=list(values) if values else None)

    # --- VALIDATION ---

    @property
    def sort_fields(self) -> list[str]:
        return [s.field for s in self.sort]

    def validate(self, document_cls: "type[Document] | None" = None) -> None:
        """
        Checks the query before it is sent.

        Raises:
            InvalidQueryError: empty sort, page size below 1, a cursor that does
                not match the sort, or (given a document class) unknown or
                unsortable fields, or a sort that does not end in the id field.
        """
        if isinstance(self.page_size, bool) or not isinstance(self.page_size, int):
            raise InvalidQueryError("page_size must be an integer", value=self.page_size)
        if self.page_size < 1:
            raise InvalidQueryError("page_size must be at least 1", value=self.page_size)

        if not self.sort:
            raise InvalidQueryError("search_after pagination requires a non-empty sort")

        names = self.sort_fields
        if len(set(names)) != len(names):
            raise InvalidQueryError(f"Duplicate fields in sort: {names}")

        if self.search_after is not None and len(self.search_after) != len(self.sort):
            raise InvalidQueryError(
                f"search_after has {len(self.search_after)} values "
                f"but the sort has {len(self.sort)} fields",
                value=self.search_after,
            )

        if document_cls is None:
            return

        options = document_cls._meta
        for name in names:
            if options.get_field_type(name) is None:
                raise InvalidQueryError(
                    f"Unknown sort field '{name}' on {document_cls.__name__}", field=name
                )
            if not options.is_sortable(name):
                raise InvalidQueryError(
                    f"Field '{name}' of type {options.field_types[name].value} "
                    "cannot be used for sorting",
                    field=name,
                )

        # Ties on the last sort field would be skipped by the strict search_after
        if names[-1] != options.id_field:
            raise InvalidQueryError(
                f"The sort must end in the id field '{options.id_field}' of "
                f"{document_cls.__name__}, got '{names[-1]}'",
                field=names[-1],
            )

        for name in self.criteria or {}:
            if options.get_field_type(name) is None:
                raise InvalidQueryError(
                    f"Unknown filter field '{name}' on {document_cls.__name__}", field=name
                )
