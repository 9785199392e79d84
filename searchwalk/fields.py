from enum import Enum
from typing import Any

from pydantic import Field


class FieldType(str, Enum):
    """Search type of a document field. Decides whether the field can be sorted on."""

    AUTO = "auto"
    TEXT = "text"
    KEYWORD = "keyword"
    LONG = "long"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    DATE = "date"

    @property
    def sortable(self) -> bool:
        # Analyzed full-text fields have no doc values to sort on
        return self is not FieldType.TEXT


def Id(default: Any = ..., **kwargs: Any) -> Any:
    """
    Marks a Pydantic field as the document identifier.

    Usage:
        id: int | None = Id()

    Architectural Note:
    -------------------
    This function wraps the standard Pydantic Field. It injects a hidden flag
    ('_search_id') into 'json_schema_extra'. The DocumentMeta metaclass will
    inspect this flag at class creation time to identify the id field
    without requiring the user to explicitly define it in Meta.
    The id is the natural unique tiebreaker of a sort.
    """
    json_schema_extra = kwargs.pop("json_schema_extra", {})
    json_schema_extra["_search_id"] = True
    # The '...' (Ellipsis) is Pydantic's way of saying "Required field" if no default is provided.
    return Field(default, json_schema_extra=json_schema_extra, **kwargs)


def DocField(type: FieldType = FieldType.AUTO, default: Any = ..., **kwargs: Any) -> Any:
    """
    Declares the search type of a Pydantic field.

    Usage:
        message: str | None = DocField(FieldType.TEXT, default=None)

    Fields without a declaration are treated as FieldType.AUTO (sortable).
    """
    json_schema_extra = kwargs.pop("json_schema_extra", {})
    json_schema_extra["_search_type"] = FieldType(type).value
    return Field(default, json_schema_extra=json_schema_extra, **kwargs)
