"""
In-memory vector store — process-local collections scored with numpy.

This is the store the VectorStoreService delegates to by default. It is a
brute-force index: every search scores every record in the collection.
Good for tests, prototypes and small corpora; nothing is persisted.

Usage:
    store = InMemoryVectorStore()
    notes = store.get_collection("notes")
    await notes.ensure_exists()
    await notes.upsert("n1", {"key": "n1", "text": "hi", "embedding": [0.1, 0.9]})
    results = await notes.search([0.0, 1.0], top=3)
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import numpy as np

from aibridge.exceptions import VectorStoreError
from aibridge.vectorstore.definitions import (
    VectorSearchResult,
    VectorStoreCollectionDefinition,
    get_field,
)

logger = logging.getLogger(__name__)


def score_vectors(
    query: np.ndarray, matrix: np.ndarray, distance_function: str
) -> np.ndarray:
    """Score each row of matrix against query; higher is always better."""
    if distance_function == "dot":
        return matrix @ query
    if distance_function == "euclidean":
        return -np.linalg.norm(matrix - query, axis=1)

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    with np.errstate(divide="ignore", invalid="ignore"):
        return (matrix @ query) / norms


class InMemoryCollection:
    """
    Handle to one named collection.

    Handles are cheap; the records live in the owning store, so two
    handles with the same name see the same data.
    """

    def __init__(
        self,
        store: InMemoryVectorStore,
        name: str,
        definition: Optional[VectorStoreCollectionDefinition] = None,
    ):
        self._store = store
        self.name = name
        self.definition = definition or VectorStoreCollectionDefinition()

    def _records(self, operation: str) -> dict[Any, Any]:
        records = self._store._collections.get(self.name)
        if records is None:
            raise VectorStoreError(
                f"Collection '{self.name}' does not exist",
                operation=operation,
                collection=self.name,
            )
        return records

    async def exists(self) -> bool:
        return self.name in self._store._collections

    async def ensure_exists(self) -> None:
        """Create the collection if missing. Idempotent."""
        if self.name not in self._store._collections:
            self._store._collections[self.name] = {}
            self._store._definitions[self.name] = self.definition
            logger.debug("collection_created", extra={"collection": self.name})

    async def upsert(self, key: Any, record: Any) -> None:
        """
        Insert or replace a record.

        The record's own key field is authoritative: with key=None it is
        used as the key, otherwise the two must agree.
        """
        records = self._records("upsert")

        record_key = get_field(record, self.definition.key_field)
        if key is None:
            key = record_key
        if key is None:
            raise VectorStoreError(
                f"Record has no '{self.definition.key_field}' and no key was given",
                operation="upsert",
                collection=self.name,
            )
        if record_key is not None and record_key != key:
            raise VectorStoreError(
                f"Key {key!r} does not match record {self.definition.key_field}={record_key!r}",
                operation="upsert",
                collection=self.name,
            )

        dimensions = self.definition.dimensions
        vector = get_field(record, self.definition.vector_field)
        if dimensions is not None and vector is not None and len(vector) != dimensions:
            raise VectorStoreError(
                f"Vector has {len(vector)} dimensions, collection expects {dimensions}",
                operation="upsert",
                collection=self.name,
            )

        records[key] = record

    async def get(self, key: Any) -> Optional[Any]:
        return self._records("get").get(key)

    async def delete(self, key: Any) -> None:
        self._records("delete").pop(key, None)

    async def count(self) -> int:
        return len(self._records("count"))

    async def search(
        self, query_vector: Sequence[float], top: int = 5
    ) -> list[VectorSearchResult[Any]]:
        """
        Return up to `top` records ordered by descending score.

        Records with no vector, a vector of another length, or (for cosine)
        a zero vector are not scored.
        """
        if top <= 0:
            raise ValueError("top must be a positive integer")

        records = self._records("search")
        query = np.asarray(query_vector, dtype=np.float64)

        candidates: list[Any] = []
        rows: list[Sequence[float]] = []
        for record in records.values():
            vector = get_field(record, self.definition.vector_field)
            if vector is None or len(vector) != query.shape[0]:
                continue
            candidates.append(record)
            rows.append(vector)

        if not candidates:
            return []

        scores = score_vectors(
            query, np.asarray(rows, dtype=np.float64), self.definition.distance_function
        )
        order = [i for i in np.argsort(-scores, kind="stable") if np.isfinite(scores[i])]

        return [
            VectorSearchResult(record=candidates[i], score=float(scores[i]))
            for i in order[:top]
        ]


class InMemoryVectorStore:
    """Named collections of records kept in process memory."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[Any, Any]] = {}
        self._definitions: dict[str, VectorStoreCollectionDefinition] = {}

    def get_collection(
        self,
        name: str,
        definition: Optional[VectorStoreCollectionDefinition] = None,
    ) -> InMemoryCollection:
        """
        Return a handle; the collection is created by ensure_exists().

        Without a definition the one the collection was created with is
        used. A different definition for an existing collection is rejected.
        """
        existing = self._definitions.get(name)
        if definition is not None and existing is not None and definition != existing:
            raise VectorStoreError(
                f"Collection '{name}' already exists with a different definition",
                operation="get_collection",
                collection=name,
            )
        return InMemoryCollection(self, name, definition or existing)

    def list_collection_names(self) -> list[str]:
        return sorted(self._collections)

    async def delete_collection(self, name: str) -> None:
        self._collections.pop(name, None)
        self._definitions.pop(name, None)
