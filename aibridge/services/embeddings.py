"""
Embedding Service — provider-neutral text embeddings.

Forwards the whole input batch to the selected provider's generator in one
call (batch_size from configuration is not applied here) and keeps output
order equal to input order.

Usage:
    vectors = await ai.embeddings.generate_embeddings(["cat", "dog", "kitten"])
    score = ai.embeddings.calculate_similarity(vectors[0], vectors[2])
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

import numpy as np

from aibridge.config.schema import EmbeddingServiceOptions
from aibridge.exceptions import BackendError, GeneratorUnavailableError
from aibridge.providers.base import AIProvider, EmbeddingGenerator
from aibridge.providers.registry import ProviderRegistry
from aibridge.services.base import ProviderSelection

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    dot(a, b) / (|a| * |b|).

    Raises:
        ValueError: On length mismatch, empty input or a zero-magnitude vector.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.ndim != 1 or vb.ndim != 1:
        raise ValueError("Embeddings must be one-dimensional vectors")
    if va.shape != vb.shape:
        raise ValueError(
            f"Embedding length mismatch: {va.shape[0]} != {vb.shape[0]}"
        )
    if va.size == 0:
        raise ValueError("Embeddings must not be empty")

    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        raise ValueError("Cosine similarity is undefined for a zero vector")

    return float(np.dot(va, vb) / norm)


class EmbeddingService(ProviderSelection):
    """Embedding facade over the provider registry."""

    def __init__(
        self,
        registry: ProviderRegistry,
        default_provider: str,
        options: Optional[EmbeddingServiceOptions] = None,
        model_name: Optional[str] = None,
    ):
        super().__init__(registry, default_provider, model_name)
        self._options = options or EmbeddingServiceOptions()

    @property
    def options(self) -> EmbeddingServiceOptions:
        return self._options

    def _get_generator(self, provider: AIProvider) -> EmbeddingGenerator:
        generator = provider.get_embedding_generator(self._model_name)
        if generator is None:
            raise GeneratorUnavailableError(provider.name, model=self._model_name)
        return generator

    async def generate_embedding(self, text: str) -> list[float]:
        """Embed one text (a single-item batch call)."""
        vectors = await self.generate_embeddings([text])
        if not vectors:
            raise BackendError(
                "Embedding backend returned no vectors",
                provider=self._provider_name,
            )
        return vectors[0]

    async def generate_embeddings(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed a batch of texts; output[i] belongs to texts[i].

        Raises:
            ProviderNotFoundError: Selected provider is not registered.
            GeneratorUnavailableError: Provider has no embedding generator.
            BackendError: The provider call failed or returned a wrong count.
        """
        provider = self._get_provider()
        generator = self._get_generator(provider)

        batch = list(texts)
        if not batch:
            return []

        start = time.monotonic()
        vectors = await generator.generate(batch)

        if len(vectors) != len(batch):
            raise BackendError(
                f"Embedding backend returned {len(vectors)} vectors "
                f"for {len(batch)} inputs",
                provider=provider.name,
            )

        logger.info(
            "embeddings_generated",
            extra={
                "provider": generator.provider_name,
                "model": generator.model,
                "count": len(batch),
                "duration_ms": round((time.monotonic() - start) * 1000, 1),
            },
        )
        return vectors

    def calculate_similarity(
        self, embedding1: Sequence[float], embedding2: Sequence[float]
    ) -> float:
        """Cosine similarity of two vectors (see cosine_similarity)."""
        return cosine_similarity(embedding1, embedding2)
