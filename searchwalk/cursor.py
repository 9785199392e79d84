import base64
import binascii
import json
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidQueryError

if TYPE_CHECKING:
    from .query import SortField

CURSOR_PREFIX = "after"


def encode_cursor(sort: "Sequence[SortField]", sort_values: Sequence[Any]) -> str:
    """Encode the sort values of a page's last hit as an opaque, URL-safe cursor token.

    The token remembers the sort it was issued for, so that a client cannot
    resume a walk under a different ordering.
    """
    data = {"sort": [s.export() for s in sort], "after": list(sort_values)}
    try:
        payload = json.dumps(data, separators=(",", ":")).encode()
    except TypeError as e:
        raise InvalidQueryError(
            f"Sort values cannot be encoded as a cursor: {e!s}", value=sort_values, original_error=e
        ) from e
    return CURSOR_PREFIX + ":" + base64.urlsafe_b64encode(payload).decode()


def decode_cursor(token: str, sort: "Sequence[SortField]") -> list[Any]:
    """Decode a cursor token back into sort values for the given sort.

    Raises:
        InvalidQueryError: malformed token, or a token issued for another sort
    """
    if not isinstance(token, str):
        raise InvalidQueryError("Malformed cursor token", value=token)
    try:
        prefix, encoded = token.split(":", 1)
        data = json.loads(base64.urlsafe_b64decode(encoded.encode()))
    except (ValueError, binascii.Error) as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors too
        raise InvalidQueryError("Malformed cursor token", value=token, original_error=e) from e

    if prefix != CURSOR_PREFIX or not isinstance(data, dict):
        raise InvalidQueryError("Malformed cursor token", value=token)

    if data.get("sort") != [s.export() for s in sort]:
        raise InvalidQueryError("You cannot change the sort while resuming from a cursor.")

    values = data.get("after")
    if not isinstance(values, list) or len(values) != len(sort):
        raise InvalidQueryError("Malformed cursor token", value=token)
    return values
