import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from ..base import Document
    from ..pagination import SearchPage
    from ..query import Query
    from .base import SearchBackend

T = TypeVar("T", bound="Document")


class ThreadedAsyncBackend:
    """
    Exposes a blocking SearchBackend as an AsyncSearchBackend.
    Every call runs in the default executor so the event loop is never blocked by I/O.
    """

    def __init__(self, backend: "SearchBackend") -> None:
        self.backend = backend

    async def index_entities(self, entities: "Sequence[Document]") -> None:
        await asyncio.to_thread(self.backend.index_entities, entities)

    async def search(self, query: "Query", document_cls: type[T]) -> "SearchPage[T]":
        return await asyncio.to_thread(self.backend.search, query, document_cls)
