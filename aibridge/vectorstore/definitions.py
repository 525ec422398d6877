"""
Vector collection schema — which record field is the key, which hold data,
and which holds the embedding.

Definitions are usually inferred from a record type whose fields are
tagged:

    @dataclass
    class Note:
        id: str = key_field()
        text: str = data_field()
        embedding: list[float] = vector_field(dimensions=384)

    definition = VectorStoreCollectionDefinition.from_record_type(Note)

Pydantic models tag fields through json_schema_extra:

    class Note(BaseModel):
        id: str = Field(json_schema_extra={"vector_store": "key"})
        embedding: list[float] = Field(json_schema_extra={"vector_store": "vector"})

Untagged types fall back to fields named `key` and `embedding`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

TAG = "vector_store"

DISTANCE_FUNCTIONS = ("cosine", "dot", "euclidean")

R = TypeVar("R")


def key_field(**kwargs: Any) -> Any:
    return field(metadata={TAG: "key"}, **kwargs)


def data_field(**kwargs: Any) -> Any:
    kwargs.setdefault("default", None)
    return field(metadata={TAG: "data"}, **kwargs)


def vector_field(dimensions: Optional[int] = None, **kwargs: Any) -> Any:
    kwargs.setdefault("default_factory", list)
    return field(metadata={TAG: "vector", "dimensions": dimensions}, **kwargs)


@dataclass(frozen=True)
class VectorStoreCollectionDefinition:
    """Schema of one collection."""

    key_field: str = "key"
    vector_field: str = "embedding"
    data_fields: tuple[str, ...] = ()
    dimensions: Optional[int] = None
    distance_function: str = "cosine"

    def __post_init__(self) -> None:
        if self.distance_function not in DISTANCE_FUNCTIONS:
            raise ValueError(
                f"Unsupported distance function: {self.distance_function}. "
                f"Supported: {', '.join(DISTANCE_FUNCTIONS)}"
            )

    @classmethod
    def from_record_type(cls, record_type: type) -> VectorStoreCollectionDefinition:
        """Infer the definition from tagged dataclass or pydantic fields."""
        tags: list[tuple[str, str, dict[str, Any]]] = []

        if dataclasses.is_dataclass(record_type):
            for f in dataclasses.fields(record_type):
                if TAG in f.metadata:
                    tags.append((f.name, f.metadata[TAG], dict(f.metadata)))
        elif isinstance(record_type, type) and issubclass(record_type, BaseModel):
            for name, info in record_type.model_fields.items():
                extra = info.json_schema_extra
                if isinstance(extra, dict) and TAG in extra:
                    tags.append((name, str(extra[TAG]), dict(extra)))

        if not tags:
            return cls()

        keys = [name for name, kind, _ in tags if kind == "key"]
        vectors = [(name, meta) for name, kind, meta in tags if kind == "vector"]
        if len(keys) != 1 or len(vectors) != 1:
            raise ValueError(
                f"{record_type.__name__} must tag exactly one key field and "
                f"one vector field (found {len(keys)} key, {len(vectors)} vector)"
            )

        vector_name, vector_meta = vectors[0]
        return cls(
            key_field=keys[0],
            vector_field=vector_name,
            data_fields=tuple(name for name, kind, _ in tags if kind == "data"),
            dimensions=vector_meta.get("dimensions"),
            distance_function=vector_meta.get("distance_function", "cosine"),
        )


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dict, dataclass or model record."""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


@dataclass
class VectorSearchResult(Generic[R]):
    """A stored record and its similarity score (higher is more similar)."""

    record: R
    score: float
