from aibridge.vectorstore.definitions import (
    VectorSearchResult,
    VectorStoreCollectionDefinition,
    data_field,
    key_field,
    vector_field,
)
from aibridge.vectorstore.in_memory import InMemoryCollection, InMemoryVectorStore

__all__ = [
    "InMemoryCollection",
    "InMemoryVectorStore",
    "VectorSearchResult",
    "VectorStoreCollectionDefinition",
    "data_field",
    "key_field",
    "vector_field",
]
