"""
Vector Store Service — thin pass-through to a vector collection store.

Adds no consistency semantics of its own: collection creation, replace on
upsert and similarity ordering are whatever the wrapped store does. The
default store is the in-process InMemoryVectorStore.

Usage:
    await ai.vector_store.get_collection("notes", VectorStoreCollectionDefinition.from_record_type(Note))
    await ai.vector_store.upsert("notes", note.id, note)
    for hit in await ai.vector_store.search("notes", query_vector, top=3):
        print(hit.score, hit.record)
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from aibridge.vectorstore.definitions import (
    VectorSearchResult,
    VectorStoreCollectionDefinition,
)
from aibridge.vectorstore.in_memory import InMemoryCollection, InMemoryVectorStore

logger = logging.getLogger(__name__)

DEFAULT_TOP = 5


class VectorStoreService:
    """Vector store facade."""

    def __init__(self, store: Optional[InMemoryVectorStore] = None):
        self._store = store or InMemoryVectorStore()

    @property
    def store(self) -> InMemoryVectorStore:
        return self._store

    async def get_collection(
        self,
        collection_name: str,
        definition: Optional[VectorStoreCollectionDefinition] = None,
    ) -> InMemoryCollection:
        """Ensure the named collection exists and return a handle to it."""
        collection = self._store.get_collection(collection_name, definition)
        await collection.ensure_exists()
        return collection

    async def search(
        self,
        collection_name: str,
        query_vector: Sequence[float],
        top: int = DEFAULT_TOP,
    ) -> list[VectorSearchResult[Any]]:
        """
        Up to `top` nearest records, highest score first.

        Raises:
            VectorStoreError: If the collection was never created.
        """
        collection = self._store.get_collection(collection_name)
        results = await collection.search(query_vector, top=top)

        logger.debug(
            "vector_search_completed",
            extra={
                "collection": collection_name,
                "count": len(results),
                "top": top,
            },
        )
        return results

    async def upsert(self, collection_name: str, key: Any, record: Any) -> None:
        """
        Insert or replace `record`, creating the collection if needed.

        Pass key=None to use the record's own key field.
        """
        collection = await self.get_collection(collection_name)
        await collection.upsert(key, record)
