"""
search_after walk example

Loads ten messages into the in-memory backend and reads them back three at a
time. Swap InMemorySearchBackend for DynamoSearchBackend("documents") to run
the same walk against a DynamoDB table.
"""

import logging

from searchwalk import (
    DocField,
    Document,
    FieldType,
    Id,
    InMemorySearchBackend,
    PaginationWalker,
    Query,
    encode_cursor,
)

logging.basicConfig(level=logging.INFO)


class Message(Document):
    id: int | None = Id()
    message: str | None = DocField(FieldType.TEXT)

    class Meta:
        index_name = "messages"


backend = InMemorySearchBackend()
backend.index_entities([Message(id=i, message=f"message {i}") for i in range(1, 11)])

query = Query.find_all(page_size=3).add_sort("id")
walker = PaginationWalker(backend, Message, max_iterations=10)

# Page by page
for page in walker.pages(query):
    print([m.id for m in page.contents], "next cursor:", page.last_sort_values)

# Everything at once
print(f"\nWalked {len(walker.all(query))} messages")

# Hand an opaque cursor to a client, resume later
first_page = next(walker.pages(query))
token = encode_cursor(query.sort, first_page.last_sort_values)
print(f"\nResuming from {token}:", [m.id for m in walker.resume(query, token)])
