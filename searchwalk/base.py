from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

# We must inherit from Pydantic's internal metaclass to coexist with BaseModel
from pydantic._internal._model_construction import ModelMetaclass

from .config import DocumentOptions
from .exceptions import DocumentSerializationError
from .fields import FieldType

if TYPE_CHECKING:
    from .query import SortField

# Generic TypeVar to allow from_source() to return the correct subclass type
T = TypeVar("T", bound="Document")


class DocumentMeta(ModelMetaclass):
    """
    Collects the search metadata of a Document class.
    It runs ONCE when the class is defined (imported), not when instantiated.
    """

    def __new__(
        cls, name: str, bases: tuple[type, ...], namespace: dict[str, Any], **kwargs: Any
    ) -> Any:
        # 1. Create the Pydantic class normally
        new_cls = super().__new__(cls, name, bases, namespace, **kwargs)

        # Stop processing if it's the base Document class itself
        if name == "Document":
            return new_cls

        # 2. Extract configuration from the inner 'Meta' class
        meta_cls = namespace.get("Meta")

        base_options: DocumentOptions | None = None
        for base in bases:
            if isinstance(getattr(base, "_meta", None), DocumentOptions):
                base_options = base._meta
                break

        if not meta_cls and base_options is None:
            raise ValueError(f"Document {name} is missing a 'class Meta' with 'index_name'.")

        if meta_cls and not hasattr(meta_cls, "index_name"):
            raise ValueError(f"Document {name} is missing an 'index_name' in class Meta.")

        index_name = meta_cls.index_name if meta_cls else base_options.index_name  # type: ignore[union-attr]

        # 3. Scan fields to find the id field and the declared search types
        id_field: str | None = None
        field_types: dict[str, FieldType] = {}

        # model_fields is a Pydantic attribute added at class creation - mypy sees incomplete type
        for field_name, field_info in new_cls.model_fields.items():  # type: ignore[attr-defined]
            extra = field_info.json_schema_extra
            if not isinstance(extra, dict):
                extra = {}

            if extra.get("_search_id"):
                if id_field is not None and id_field != field_name:
                    raise ValueError(f"Document {name} can have only one field defined with Id()")
                id_field = field_name

            field_types[field_name] = FieldType(extra.get("_search_type", FieldType.AUTO.value))

        if id_field is None and base_options is not None:
            id_field = base_options.id_field

        if id_field is None:
            raise ValueError(f"Document {name} must have exactly one field defined with Id()")

        # 4. Attach the processed configuration to the class
        # We use a protected attribute '_meta' to avoid colliding with user fields
        new_cls._meta = DocumentOptions(  # type: ignore[attr-defined]
            index_name=index_name,
            id_field=id_field,
            field_types=field_types,
        )
        return new_cls


class Document(BaseModel, metaclass=DocumentMeta):
    """
    The Base Class users will inherit from.
    A Pydantic model stored in a search index; equality is by value.

    Usage:
        class Message(Document):
            class Meta:
                index_name = "messages"

            id: int | None = Id()
            message: str | None = DocField(FieldType.TEXT, default=None)
    """

    # Type Hinting for the configuration injected by Metaclass
    _meta: ClassVar[DocumentOptions]

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @classmethod
    def index_name(cls) -> str:
        return cls._meta.index_name

    def get_id(self) -> Any:
        return getattr(self, self._meta.id_field)

    def sort_values(self, sort: "Sequence[SortField]") -> list[Any]:
        """
        Evaluates a sort specification on this document.
        The result is what a backend returns as the hit's sort values.
        """
        return [getattr(self, s.field) for s in sort]

    def to_source(self) -> dict[str, Any]:
        """Serializes the document to the plain dict stored in the index."""
        return self.model_dump(mode="python")

    @classmethod
    def from_source(cls: type[T], source: dict[str, Any]) -> T:
        """
        Builds a document from the stored dict.

        Raises:
            DocumentSerializationError: the stored data no longer matches the model
        """
        try:
            return cls.model_validate(source)
        except PydanticValidationError as e:
            raise DocumentSerializationError(
                f"Stored document does not match {cls.__name__}: {e!s}", original_error=e
            ) from e
