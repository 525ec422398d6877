"""
Tests for the embedding facade and cosine similarity.
"""

from __future__ import annotations

import math

import pytest

from aibridge.exceptions import (
    BackendError,
    GeneratorUnavailableError,
    ProviderNotFoundError,
)
from aibridge.providers.registry import ProviderRegistry
from aibridge.services.embeddings import EmbeddingService, cosine_similarity
from tests.conftest import FakeEmbeddingGenerator, FakeProvider

A = [1.0, 0.0]
B = [0.0, 1.0]
C = [0.9, 0.1]


@pytest.fixture
def provider():
    return FakeProvider("Test", embeddings={"cat": A, "dog": B, "kitten": C})


@pytest.fixture
def embeddings(provider):
    return EmbeddingService(ProviderRegistry([provider]), "Test")


class TestCosineSimilarity:

    def test_orthogonal(self):
        assert cosine_similarity(A, B) == pytest.approx(0.0)

    def test_close_vectors(self):
        assert cosine_similarity(A, C) == pytest.approx(0.9939, abs=1e-4)

    def test_symmetric(self):
        assert cosine_similarity(A, C) == cosine_similarity(C, A)
        assert cosine_similarity([3, -1, 2], [0.5, 4, -2]) == pytest.approx(
            cosine_similarity([0.5, 4, -2], [3, -1, 2])
        )

    @pytest.mark.parametrize("vector", [A, C, [3.0, -4.0, 12.0]])
    def test_self_similarity_is_one(self, vector):
        assert cosine_similarity(vector, vector) == pytest.approx(1.0)

    def test_opposite(self):
        assert cosine_similarity([1, 2], [-1, -2]) == pytest.approx(-1.0)

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="mismatch"):
            cosine_similarity([1, 0], [1, 0, 0])

    def test_zero_vector(self):
        with pytest.raises(ValueError, match="zero"):
            cosine_similarity([0, 0], [1, 0])

    def test_empty(self):
        with pytest.raises(ValueError):
            cosine_similarity([], [])

    def test_returns_python_float(self):
        assert isinstance(cosine_similarity(A, C), float)


class TestEmbeddingService:

    @pytest.mark.asyncio
    async def test_order_preserved(self, embeddings):
        vectors = await embeddings.generate_embeddings(["kitten", "cat", "dog"])
        assert vectors == [C, A, B]

    @pytest.mark.asyncio
    async def test_one_batch_call(self, embeddings, provider):
        await embeddings.generate_embeddings(["cat", "dog", "kitten"])
        assert provider.generators[0].calls == [["cat", "dog", "kitten"]]

    @pytest.mark.asyncio
    async def test_single_embedding(self, embeddings, provider):
        assert await embeddings.generate_embedding("dog") == B
        assert provider.generators[0].calls == [["dog"]]

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_call(self, embeddings, provider):
        assert await embeddings.generate_embeddings([]) == []
        assert provider.request_count == 0

    @pytest.mark.asyncio
    async def test_similarity_from_generated(self, embeddings):
        cat, dog, kitten = await embeddings.generate_embeddings(["cat", "dog", "kitten"])
        assert embeddings.calculate_similarity(cat, kitten) > embeddings.calculate_similarity(cat, dog)

    @pytest.mark.asyncio
    async def test_model_selection(self, embeddings, provider):
        await embeddings.with_model("e5").generate_embeddings(["cat"])
        assert provider.generators[0].model == "e5"

    @pytest.mark.asyncio
    async def test_unknown_provider(self, embeddings, provider):
        with pytest.raises(ProviderNotFoundError):
            await embeddings.with_provider("Nope").generate_embeddings(["cat"])
        assert provider.request_count == 0

    @pytest.mark.asyncio
    async def test_generator_unavailable(self):
        service = EmbeddingService(
            ProviderRegistry([FakeProvider("Test", has_embeddings=False)]), "Test"
        )
        with pytest.raises(GeneratorUnavailableError):
            await service.generate_embeddings(["cat"])

    @pytest.mark.asyncio
    async def test_count_mismatch_is_backend_error(self):
        class ShortGenerator(FakeEmbeddingGenerator):
            async def generate(self, texts):
                return [[1.0, 0.0]]

        class ShortProvider(FakeProvider):
            def get_embedding_generator(self, model_name=None):
                return ShortGenerator(self.name, "short", {})

        service = EmbeddingService(ProviderRegistry([ShortProvider("Test")]), "Test")
        with pytest.raises(BackendError):
            await service.generate_embeddings(["a", "b"])

    def test_batch_size_carried(self, embeddings):
        assert embeddings.options.batch_size == 100
        assert embeddings.options.default_dimensions == 384

    def test_calculate_similarity_is_sync(self, embeddings):
        assert math.isclose(embeddings.calculate_similarity(A, B), 0.0, abs_tol=1e-12)
