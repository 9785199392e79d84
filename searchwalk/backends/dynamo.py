"""
DynamoDB-backed search backend.

Every document is stored in one table, partitioned by index name and keyed by
the document id. The table's range key is what makes search_after cheap here:
the cursor becomes a key condition (#sk > :after), so each page is a seek into
the partition instead of a skip over all earlier rows.

Table layout:
    HASH  <partition_key> (S)  the document's Meta.index_name
    RANGE <id field>      (N|S) the document id
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, TypeVar

import boto3

from .._logging import logger, redact_key
from ..exceptions import (
    BackendThrottledError,
    DocumentSerializationError,
    InvalidQueryError,
    handle_backend_errors,
)
from ..pagination import SearchHit, SearchPage
from ..query import SortDirection
from ..serializer import DynamoSerializer

if TYPE_CHECKING:
    from ..base import Document
    from ..query import Query

T = TypeVar("T", bound="Document")

# DynamoDB limit for a single BatchWriteItem call
BATCH_WRITE_SIZE = 25


class DynamoSearchBackend:
    """
    A SearchBackend over a single DynamoDB table.

    Only sorts on the id field (either direction) can be served, because that
    is the only order the table maintains.

    Usage:
        backend = DynamoSearchBackend("documents")
        backend.index_entities(messages)
        page = backend.search(Query.find_all(3).add_sort("id"), Message)
    """

    def __init__(
        self,
        table_name: str,
        client: Any | None = None,
        region: str | None = None,
        partition_key: str = "index",
        max_write_attempts: int = 5,
    ) -> None:
        self.table_name = table_name
        self.region = region
        self.partition_key = partition_key
        self.max_write_attempts = max_write_attempts
        self.serializer = DynamoSerializer()
        self._client = client

    @property
    def client(self) -> Any:
        """
        Returns a Boto3 DynamoDB Client.
        Created on first use from the standard AWS configuration (env, profile).
        """
        if self._client is None:
            self._client = boto3.client("dynamodb", region_name=self.region)
        return self._client

    # --- WRITES ---

    def _to_item(self, entity: "Document") -> dict[str, Any]:
        if entity.get_id() is None:
            raise DocumentSerializationError(
                f"{type(entity).__name__} needs an id to be stored in DynamoDB"
            )
        source = entity.to_source()
        if self.partition_key in source:
            raise DocumentSerializationError(
                f"Field '{self.partition_key}' of {type(entity).__name__} "
                "collides with the table partition key"
            )
        return self.serializer.to_dynamo({self.partition_key: entity.index_name(), **source})

    def index_entities(self, entities: "Sequence[Document]") -> None:
        requests = [{"PutRequest": {"Item": self._to_item(entity)}} for entity in entities]

        logger.info(
            "Indexing documents",
            extra={
                "table": self.table_name,
                "operation": "index",
                "backend": "dynamodb",
                "count": len(requests),
            },
        )

        for start in range(0, len(requests), BATCH_WRITE_SIZE):
            self._batch_write(requests[start : start + BATCH_WRITE_SIZE])

        logger.info("Index successful", extra={"table": self.table_name, "operation": "index"})

    def _batch_write(self, requests: list[dict[str, Any]]) -> None:
        pending = {self.table_name: requests}
        for attempt in range(1, self.max_write_attempts + 1):
            with handle_backend_errors(index_name=self.table_name):
                response = self.client.batch_write_item(RequestItems=pending)

            pending = response.get("UnprocessedItems") or {}
            if not pending:
                return

            logger.debug(
                "Resubmitting unprocessed items",
                extra={
                    "table": self.table_name,
                    "operation": "index",
                    "attempt": attempt,
                    "count": len(pending.get(self.table_name, [])),
                },
            )

        raise BackendThrottledError(
            f"Items still unprocessed after {self.max_write_attempts} attempts",
            index_name=self.table_name,
        )

    # --- SEARCH ---

    def _check_sort(self, query: "Query", document_cls: "type[Document]") -> None:
        id_field = document_cls._meta.id_field
        if len(query.sort) != 1 or query.sort[0].field != id_field:
            raise InvalidQueryError(
                f"DynamoSearchBackend can only sort by the id field '{id_field}', "
                f"got {[s.export() for s in query.sort]}",
                field=query.sort_fields[0] if query.sort else None,
            )

    def _build_request(self, query: "Query", document_cls: "type[Document]") -> dict[str, Any]:
        sort_field = query.sort[0]
        ascending = sort_field.direction is SortDirection.ASC

        key_expr = "#pk = :pk"
        names = {"#pk": self.partition_key}
        values = {":pk": self.serializer.to_dynamo_value(document_cls.index_name())}

        # The cursor is a seek on the range key
        if query.search_after is not None:
            key_expr += " AND #sk > :after" if ascending else " AND #sk < :after"
            names["#sk"] = sort_field.field
            values[":after"] = self.serializer.to_dynamo_value(query.search_after[0])

        kwargs: dict[str, Any] = {
            "TableName": self.table_name,
            "KeyConditionExpression": key_expr,
            "ScanIndexForward": ascending,
        }

        if query.criteria:
            filter_parts = []
            for i, (name, value) in enumerate(sorted(query.criteria.items())):
                names[f"#f{i}"] = name
                values[f":f{i}"] = self.serializer.to_dynamo_value(value, name=name)
                filter_parts.append(f"#f{i} = :f{i}")
            kwargs["FilterExpression"] = " AND ".join(filter_parts)

        kwargs["ExpressionAttributeNames"] = names
        kwargs["ExpressionAttributeValues"] = values
        return kwargs

    def search(self, query: "Query", document_cls: type[T]) -> SearchPage[T]:
        query.validate(document_cls)
        self._check_sort(query, document_cls)
        kwargs = self._build_request(query, document_cls)

        logger.info(
            "Executing search page",
            extra={
                "table": self.table_name,
                "index": document_cls.index_name(),
                "operation": "search",
                "backend": "dynamodb",
                "page_size": query.page_size,
                "has_filter": bool(query.criteria),
                "has_cursor": query.search_after is not None,
                "cursor_hash": redact_key(query.search_after),
            },
        )

        # Limit caps the items *evaluated*, before FilterExpression is applied.
        # A filtered page can come back short or empty while more rows remain,
        # and an empty page would end the walk. Keep reading until the page is
        # full or the partition is exhausted.
        items: list[dict[str, Any]] = []
        while len(items) < query.page_size:
            kwargs["Limit"] = query.page_size - len(items)
            with handle_backend_errors(index_name=self.table_name):
                response = self.client.query(**kwargs)

            items.extend(response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key

        hits = []
        for item in items[: query.page_size]:
            source = self.serializer.from_dynamo(item)
            source.pop(self.partition_key, None)
            document = document_cls.from_source(source)
            hits.append(
                SearchHit(
                    content=document,
                    sort_values=document.sort_values(query.sort),
                    id=document.get_id(),
                )
            )
        return SearchPage(hits=hits)
