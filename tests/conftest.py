"""
Shared fixtures: in-process fake providers that record every call.

No test in this suite touches the network.
"""

from __future__ import annotations

from typing import AsyncIterator, Optional

import pytest

from aibridge.config.schema import ProviderConfiguration
from aibridge.llm.messages import (
    ChatMessage,
    ChatOptions,
    ChatResponse,
    ChatRole,
    UsageDetails,
)
from aibridge.providers.base import AIProvider, ChatClient, EmbeddingGenerator
from aibridge.providers.registry import ProviderRegistry


class FakeChatClient(ChatClient):
    """Returns canned text and records every request."""

    def __init__(
        self,
        provider_name: str,
        model: str,
        reply: str = "fake reply",
        chunks: Optional[list[str]] = None,
        error: Optional[Exception] = None,
    ):
        super().__init__(provider_name, model)
        self.reply = reply
        self.chunks = chunks if chunks is not None else ["Hel", "lo", "!"]
        self.error = error
        self.calls: list[tuple[list[ChatMessage], Optional[ChatOptions]]] = []
        self.stream_closed = False

    async def get_response(self, messages, options=None) -> ChatResponse:
        self.calls.append((messages, options))
        if self.error is not None:
            raise self.error
        return ChatResponse(
            messages=[ChatMessage(ChatRole.ASSISTANT, self.reply)] if self.reply else [],
            model_id=self.model,
            finish_reason="stop",
            usage=UsageDetails(input_tokens=10, output_tokens=5),
        )

    async def get_streaming_response(self, messages, options=None) -> AsyncIterator[str]:
        self.calls.append((messages, options))
        try:
            for chunk in self.chunks:
                yield chunk
        finally:
            self.stream_closed = True


class FakeEmbeddingGenerator(EmbeddingGenerator):
    """Looks texts up in a fixed table; unknown texts get [0.5, 0.5]."""

    def __init__(self, provider_name: str, model: str, table: dict[str, list[float]]):
        super().__init__(provider_name, model)
        self.table = table
        self.calls: list[list[str]] = []

    async def generate(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [list(self.table.get(t, [0.5, 0.5])) for t in texts]


class FakeProvider(AIProvider):
    """Capability flags and clients set per test."""

    default_chat_model = "fake-chat"
    default_embedding_model = "fake-embed"

    def __init__(
        self,
        name: str = "Test",
        *,
        supports_functions: bool = True,
        supports_vision: bool = True,
        supports_streaming: bool = True,
        has_chat: bool = True,
        has_embeddings: bool = True,
        reply: str = "fake reply",
        chunks: Optional[list[str]] = None,
        error: Optional[Exception] = None,
        embeddings: Optional[dict[str, list[float]]] = None,
        config: Optional[ProviderConfiguration] = None,
    ):
        super().__init__(name, config)
        self.supports_functions = supports_functions
        self.supports_vision = supports_vision
        self.supports_streaming = supports_streaming
        self.has_chat = has_chat
        self.has_embeddings = has_embeddings
        self.reply = reply
        self.chunks = chunks
        self.error = error
        self.embeddings = embeddings or {}
        self.chat_clients: list[FakeChatClient] = []
        self.generators: list[FakeEmbeddingGenerator] = []
        self.closed = False

    def get_chat_client(self, model_name=None):
        if not self.has_chat:
            return None
        client = FakeChatClient(
            self.name,
            self.resolve_chat_model(model_name),
            reply=self.reply,
            chunks=self.chunks,
            error=self.error,
        )
        self.chat_clients.append(client)
        return client

    def get_embedding_generator(self, model_name=None):
        if not self.has_embeddings:
            return None
        generator = FakeEmbeddingGenerator(
            self.name, self.resolve_embedding_model(model_name), self.embeddings
        )
        self.generators.append(generator)
        return generator

    async def aclose(self) -> None:
        self.closed = True

    @property
    def request_count(self) -> int:
        return sum(len(c.calls) for c in self.chat_clients) + sum(
            len(g.calls) for g in self.generators
        )


@pytest.fixture
def fake_provider():
    return FakeProvider("Test")


@pytest.fixture
def registry(fake_provider):
    return ProviderRegistry([fake_provider])
