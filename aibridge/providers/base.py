"""
Provider abstractions — adapters, chat clients and embedding generators.

An AIProvider wraps one backend's native client and hands out capability
objects bound to a single model:

    provider = OpenAIProvider("OpenAI", config)
    client = provider.get_chat_client("gpt-4o-mini")
    response = await client.get_response([ChatMessage.user("hi")])

Adapters are built once at startup and shared; they hold no per-call state.
Capability flags must be checked by callers before function-calling or
vision requests (the facades do this).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from aibridge.config.schema import ProviderConfiguration
from aibridge.llm.messages import ChatMessage, ChatOptions, ChatResponse


# ---------------------------------------------------------------------------
# Capability objects
# ---------------------------------------------------------------------------

class ChatClient(ABC):
    """A chat backend bound to one model."""

    def __init__(self, provider_name: str, model: str):
        self.provider_name = provider_name
        self.model = model

    @abstractmethod
    async def get_response(
        self,
        messages: list[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ChatResponse:
        """
        Send one chat request and return the full response.

        Raises:
            BackendError: On any SDK / transport failure.
        """

    @abstractmethod
    def get_streaming_response(
        self,
        messages: list[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> AsyncIterator[str]:
        """
        Stream text fragments in arrival order.

        Implementations are async generators; empty fragments are skipped.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.provider_name}/{self.model}>"


class EmbeddingGenerator(ABC):
    """An embedding backend bound to one model."""

    def __init__(self, provider_name: str, model: str):
        self.provider_name = provider_name
        self.model = model

    @abstractmethod
    async def generate(self, texts: list[str]) -> list[list[float]]:
        """
        Embed a batch of texts.

        Returns:
            One vector per input, same order as input.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.provider_name}/{self.model}>"


# ---------------------------------------------------------------------------
# Provider adapter
# ---------------------------------------------------------------------------

class AIProvider(ABC):
    """
    Adapter for one AI backend.

    Subclasses set the capability flags and the hardcoded fallback models,
    and build their native client in __init__ (failing fast on missing
    credentials).
    """

    supports_functions: bool = False
    supports_vision: bool = False
    supports_streaming: bool = False

    default_chat_model: Optional[str] = None
    default_embedding_model: Optional[str] = None

    def __init__(self, name: str, config: Optional[ProviderConfiguration] = None):
        self._name = name
        self._config = config or ProviderConfiguration()

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> ProviderConfiguration:
        return self._config

    def resolve_chat_model(self, model_name: Optional[str] = None) -> Optional[str]:
        """Explicit name → configured default → hardcoded default."""
        return model_name or self._config.models.chat or self.default_chat_model

    def resolve_embedding_model(self, model_name: Optional[str] = None) -> Optional[str]:
        return model_name or self._config.models.embeddings or self.default_embedding_model

    @abstractmethod
    def get_chat_client(self, model_name: Optional[str] = None) -> Optional[ChatClient]:
        """Return a chat client bound to the resolved model, or None."""

    @abstractmethod
    def get_embedding_generator(
        self, model_name: Optional[str] = None
    ) -> Optional[EmbeddingGenerator]:
        """Return an embedding generator bound to the resolved model, or None."""

    async def aclose(self) -> None:
        """Release the native client. Adapters without one do nothing."""

    def describe(self) -> dict[str, object]:
        """Summary used by the CLI and logs."""
        return {
            "name": self.name,
            "supports_functions": self.supports_functions,
            "supports_vision": self.supports_vision,
            "supports_streaming": self.supports_streaming,
            "chat_model": self.resolve_chat_model(),
            "embedding_model": self.resolve_embedding_model(),
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
