"""
Provider selection shared by the chat, embedding and vision facades.

A facade is an immutable value: `with_provider()` and `with_model()` return
a copy carrying the new selection and leave the receiver untouched. The
instance held by AIService can therefore be shared across concurrent
requests; each request narrows its own copy.

    scoped = ai.chat.with_provider("Ollama").with_model("llama3.1:8b")
    await scoped.complete("hi")   # ai.chat still targets the default provider
"""

from __future__ import annotations

import copy
from typing import Optional, TypeVar

from aibridge.providers.base import AIProvider
from aibridge.providers.registry import ProviderRegistry

S = TypeVar("S", bound="ProviderSelection")


class ProviderSelection:
    """Registry handle plus the (provider, model) this facade targets."""

    def __init__(
        self,
        registry: ProviderRegistry,
        provider_name: str,
        model_name: Optional[str] = None,
    ):
        self._registry = registry
        self._provider_name = provider_name
        self._model_name = model_name

    @property
    def current_provider(self) -> str:
        return self._provider_name

    @property
    def current_model(self) -> Optional[str]:
        return self._model_name

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    def with_provider(self: S, provider_name: str) -> S:
        """Return a copy targeting another provider (model selection kept)."""
        scoped = copy.copy(self)
        scoped._provider_name = provider_name
        return scoped

    def with_model(self: S, model_name: str) -> S:
        """Return a copy targeting another model on the same provider."""
        scoped = copy.copy(self)
        scoped._model_name = model_name
        return scoped

    def _get_provider(self) -> AIProvider:
        return self._registry.require(self._provider_name)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} provider={self._provider_name!r} "
            f"model={self._model_name!r}>"
        )
