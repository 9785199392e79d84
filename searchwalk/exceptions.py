from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


class SearchWalkError(Exception):
    """Base exception for all searchwalk errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class BackendUnavailableError(SearchWalkError):
    """Raised when a call to the search backend fails to complete."""

    def __init__(
        self,
        message: str = "Search backend unavailable",
        index_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.index_name = index_name


class IndexNotFoundError(BackendUnavailableError):
    """Raised when the index (or its backing table) does not exist."""

    def __init__(self, index_name: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Index '{index_name}' not found", index_name, original_error)


class BackendThrottledError(BackendUnavailableError):
    """Raised when the backend rejects a request because of its rate limits."""

    def __init__(
        self,
        message: str = "Request rate exceeded",
        index_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, index_name, original_error)


class BackendTimeoutError(BackendUnavailableError):
    """Raised when a request to the backend times out."""

    def __init__(
        self,
        message: str = "Request timed out",
        index_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, index_name, original_error)


class PaginationOverrunError(SearchWalkError):
    """
    Raised when a walk returns more non-empty pages than its iteration cap.

    This usually means the sort is not a total order (no unique tiebreaker)
    or the dataset was modified while it was being walked.
    """

    def __init__(self, max_iterations: int, index_name: str | None = None) -> None:
        super().__init__(
            f"Pagination did not terminate after {max_iterations} pages"
            + (f" on index '{index_name}'" if index_name else "")
        )
        self.max_iterations = max_iterations
        self.index_name = index_name


class InvalidQueryError(SearchWalkError):
    """Raised when a query is rejected before it reaches the backend."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.field = field
        self.value = value


class DocumentSerializationError(SearchWalkError):
    """Raised when a document value cannot be serialized for storage."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


@contextmanager
def handle_backend_errors(index_name: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches botocore errors
    and raises the appropriate SearchWalkError subclass.

    Args:
        index_name: Optional index name for better error messages

    Usage:
        with handle_backend_errors(index_name="messages"):
            client.query(...)
    """
    try:
        yield
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        error_message = e.response.get("Error", {}).get("Message", str(e))

        if error_code == "ResourceNotFoundException":
            raise IndexNotFoundError(index_name=index_name or "unknown", original_error=e) from e

        if error_code in (
            "ProvisionedThroughputExceededException",
            "ThrottlingException",
            "RequestLimitExceeded",
        ):
            raise BackendThrottledError(
                message=error_message, index_name=index_name, original_error=e
            ) from e

        if error_code in ("RequestTimeout", "RequestTimeoutException"):
            raise BackendTimeoutError(
                message=error_message, index_name=index_name, original_error=e
            ) from e

        if error_code in ("ValidationException", "SerializationException"):
            raise InvalidQueryError(message=error_message, original_error=e) from e

        # Unknown error: the call did not complete
        raise BackendUnavailableError(
            message=f"Backend error ({error_code}): {error_message}",
            index_name=index_name,
            original_error=e,
        ) from e
    except (ConnectTimeoutError, ReadTimeoutError) as e:
        raise BackendTimeoutError(
            message=str(e), index_name=index_name, original_error=e
        ) from e
    except BotoCoreError as e:
        # Connection refused, endpoint resolution, credentials
        raise BackendUnavailableError(
            message=f"Backend call failed: {e!s}", index_name=index_name, original_error=e
        ) from e
