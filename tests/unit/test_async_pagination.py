"""
Unit tests for AsyncPaginationWalker and the threaded backend adapter.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from searchwalk import (
    AsyncPaginationWalker,
    BackendTimeoutError,
    InMemorySearchBackend,
    InvalidQueryError,
    PaginationOverrunError,
    Query,
    SearchHit,
    SearchPage,
    ThreadedAsyncBackend,
    encode_cursor,
)


def test_async_walk_returns_all_entities(memory_backend, entity_model, entities, id_query):
    walker = AsyncPaginationWalker(ThreadedAsyncBackend(memory_backend), entity_model)

    found = asyncio.run(walker.all(id_query))

    assert found == entities


def test_async_pages_are_sequential(spy_backend, entity_model, id_query):
    walker = AsyncPaginationWalker(ThreadedAsyncBackend(spy_backend), entity_model, max_iterations=10)

    async def collect():
        return [[e.id for e in page.contents] async for page in walker.pages(id_query)]

    pages = asyncio.run(collect())

    assert pages == [[1, 2, 3], [4, 5, 6], [7, 8, 9], [10]]
    cursors = [call.args[0].search_after for call in spy_backend.search.call_args_list]
    assert cursors == [None, [3], [6], [9], [10]]


def test_async_index_entities(entity_model, entities, id_query):
    backend = ThreadedAsyncBackend(InMemorySearchBackend())

    async def scenario():
        await backend.index_entities(entities)
        return await AsyncPaginationWalker(backend, entity_model).all(id_query)

    assert asyncio.run(scenario()) == entities


def test_async_overrun(entity_model, id_query):
    backend = AsyncMock()
    backend.search.return_value = SearchPage(
        hits=[SearchHit(content=entity_model(id=1, message="message 1"), sort_values=[1], id=1)]
    )
    walker = AsyncPaginationWalker(backend, entity_model, max_iterations=2)

    with pytest.raises(PaginationOverrunError):
        asyncio.run(walker.all(id_query))

    assert backend.search.await_count == 3


def test_async_backend_error_propagates(entity_model, id_query):
    backend = AsyncMock()
    backend.search.side_effect = BackendTimeoutError(index_name="test-search-after")
    walker = AsyncPaginationWalker(backend, entity_model)

    with pytest.raises(BackendTimeoutError):
        asyncio.run(walker.all(id_query))


def test_async_invalid_query_rejected_eagerly(entity_model):
    backend = AsyncMock()
    walker = AsyncPaginationWalker(backend, entity_model)

    with pytest.raises(InvalidQueryError):
        walker.walk_all(Query.find_all(page_size=3))

    backend.search.assert_not_awaited()


def test_async_resume(memory_backend, entity_model, id_query):
    walker = AsyncPaginationWalker(ThreadedAsyncBackend(memory_backend), entity_model)
    token = encode_cursor(id_query.sort, [6])

    async def collect():
        return [e.id async for e in walker.resume(id_query, token)]

    assert asyncio.run(collect()) == [7, 8, 9, 10]
