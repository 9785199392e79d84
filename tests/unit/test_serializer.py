from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID

import pytest

from searchwalk.exceptions import DocumentSerializationError
from searchwalk.serializer import DynamoSerializer


class Color(Enum):
    RED = "red"


@pytest.fixture
def serializer() -> DynamoSerializer:
    return DynamoSerializer()


def test_scalars(serializer):
    assert serializer.to_dynamo({"id": 1, "message": "hi", "flag": True, "gone": None}) == {
        "id": {"N": "1"},
        "message": {"S": "hi"},
        "flag": {"BOOL": True},
        "gone": {"NULL": True},
    }


def test_float_becomes_decimal_string(serializer):
    assert serializer.to_dynamo_value(10.5) == {"N": "10.5"}


def test_special_types(serializer):
    assert serializer.to_dynamo_value(datetime(2023, 1, 1, 10, 0, tzinfo=timezone.utc)) == {
        "S": "2023-01-01T10:00:00Z"
    }
    assert serializer.to_dynamo_value(date(2023, 1, 1)) == {"S": "2023-01-01"}
    assert serializer.to_dynamo_value(UUID(int=1)) == {"S": "00000000-0000-0000-0000-000000000001"}
    assert serializer.to_dynamo_value(Color.RED) == {"S": "red"}


def test_from_dynamo_restores_numbers(serializer):
    assert serializer.from_dynamo({"id": {"N": "3"}, "rating": {"N": "4.5"}, "x": {"NULL": True}}) == {
        "id": 3,
        "rating": 4.5,
        "x": None,
    }


def test_restore_nested(serializer):
    assert serializer._restore_to_python({"a": [Decimal("1"), {"b": Decimal("2.5")}]}) == {
        "a": [1, {"b": 2.5}]
    }


def test_unsupported_type(serializer):
    with pytest.raises(DocumentSerializationError, match="field 'blob'"):
        serializer.to_dynamo({"blob": object()})
