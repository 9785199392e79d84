from dataclasses import dataclass, field

from .fields import FieldType

# Upper bound of non-empty pages a single walk may return
DEFAULT_MAX_ITERATIONS = 10_000


@dataclass
class DocumentOptions:
    """
    Internal container for Document metadata.
    Populated by the Metaclass during class creation.
    """

    index_name: str
    id_field: str
    field_types: dict[str, FieldType] = field(default_factory=dict)

    def get_field_type(self, field_name: str) -> FieldType | None:
        """
        Get the search type of a field.

        Args:
            field_name: Name of the document field

        Returns:
            FieldType if the field exists on the document, None otherwise
        """
        return self.field_types.get(field_name)

    def is_sortable(self, field_name: str) -> bool:
        """Check whether a field exists and can be used in a sort."""
        field_type = self.get_field_type(field_name)
        return field_type is not None and field_type.sortable


@dataclass
class WalkOptions:
    """
    Tuning for a pagination walk.

    Attributes:
        max_iterations: Number of non-empty pages after which the walk is
            considered non-terminating and PaginationOverrunError is raised.
    """

    max_iterations: int = DEFAULT_MAX_ITERATIONS

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be a positive integer")
