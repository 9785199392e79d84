"""
Shared pytest fixtures and configuration for searchwalk tests.

This module provides common fixtures used across unit and integration tests,
including mocked boto3 clients, an in-memory backend, and test document definitions.
"""

import os
from unittest.mock import MagicMock

import pytest

from searchwalk import DocField, Document, FieldType, Id, InMemorySearchBackend, Query


class SearchAfterEntity(Document):
    class Meta:
        index_name = "test-search-after"

    id: int | None = Id()
    message: str | None = DocField(FieldType.TEXT)


class Article(Document):
    class Meta:
        index_name = "test-articles"

    slug: str = Id()
    author: str = DocField(FieldType.KEYWORD)
    year: int = DocField(FieldType.LONG)
    title: str = DocField(FieldType.TEXT, default="")
    rating: float | None = None


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against LocalStack")


@pytest.fixture(scope="session")
def localstack_endpoint() -> str:
    """Get LocalStack endpoint URL from environment or default."""
    return os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566")



@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    This fixture provides a mock client for unit tests that don't need
    real DynamoDB interactions.
    """
    client = MagicMock()
    client.batch_write_item.return_value = {"UnprocessedItems": {}}
    return client


@pytest.fixture
def entity_model():
    return SearchAfterEntity


@pytest.fixture
def article_model():
    return Article


@pytest.fixture
def entities() -> list[SearchAfterEntity]:
    """Ten entities with ids 1..10 and messages 'message 1'..'message 10'."""
    return [SearchAfterEntity(id=i, message=f"message {i}") for i in range(1, 11)]


@pytest.fixture
def articles() -> list[Article]:
    return [
        Article(slug="a-1", author="alice", year=2021, title="First", rating=4.5),
        Article(slug="a-2", author="bob", year=2020, title="Second", rating=3.0),
        Article(slug="a-3", author="alice", year=2020, title="Third", rating=None),
        Article(slug="a-4", author="carol", year=2022, title="Fourth", rating=5.0),
        Article(slug="a-5", author="alice", year=2021, title="Fifth", rating=2.5),
        Article(slug="a-6", author="bob", year=2022, title="Sixth", rating=4.0),
    ]


@pytest.fixture
def memory_backend(entities) -> InMemorySearchBackend:
    """An in-memory backend preloaded with the ten entities."""
    backend = InMemorySearchBackend()
    backend.index_entities(entities)
    return backend


@pytest.fixture
def spy_backend(memory_backend) -> MagicMock:
    """The preloaded in-memory backend wrapped so that calls can be inspected."""
    return MagicMock(wraps=memory_backend)


@pytest.fixture
def id_query() -> Query:
    """Match-all query, sorted ascending by id, three hits per page."""
    return Query.find_all(page_size=3).add_sort("id")
