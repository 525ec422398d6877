"""
Provider Registry — read-only name → adapter mapping.

Built once at startup from validated configuration and handed to every
facade. There is no registration after construction.

Usage:
    from aibridge.providers.registry import ProviderRegistry, build_registry

    registry = build_registry(options)          # from AIServiceOptions
    registry = ProviderRegistry([my_adapter])   # or from explicit adapters

    provider = registry.require("OpenAI")       # ProviderNotFoundError if absent
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Callable

from aibridge.config.schema import AIServiceOptions, ProviderConfiguration
from aibridge.exceptions import ProviderConfigurationError, ProviderNotFoundError
from aibridge.providers.anthropic_provider import AnthropicProvider
from aibridge.providers.base import AIProvider
from aibridge.providers.ollama_provider import OllamaProvider
from aibridge.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str, ProviderConfiguration], AIProvider]

# Adapter variants selectable through `type:` in a provider block
PROVIDER_TYPES: dict[str, ProviderFactory] = {
    "openai": OpenAIProvider,
    "ollama": OllamaProvider,
    "anthropic": AnthropicProvider,
}


class ProviderRegistry(Mapping[str, AIProvider]):
    """Immutable mapping of provider name to adapter."""

    def __init__(self, providers: Iterable[AIProvider] = ()) -> None:
        self._providers: dict[str, AIProvider] = {}
        for provider in providers:
            if provider.name in self._providers:
                raise ProviderConfigurationError(
                    f"Duplicate provider name: {provider.name}",
                    provider=provider.name,
                )
            self._providers[provider.name] = provider

    def __getitem__(self, name: str) -> AIProvider:
        return self._providers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def require(self, name: str) -> AIProvider:
        """Look up a provider, raising ProviderNotFoundError if unknown."""
        provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    def list_providers(self) -> list[dict[str, object]]:
        return [p.describe() for p in self._providers.values()]

    async def aclose(self) -> None:
        for provider in self._providers.values():
            await provider.aclose()

    def __repr__(self) -> str:
        return f"<ProviderRegistry {list(self._providers)}>"


def create_provider(name: str, config: ProviderConfiguration) -> AIProvider:
    """Construct one adapter from its config block (fails fast)."""
    provider_type = (config.type or name).lower()
    factory = PROVIDER_TYPES.get(provider_type)
    if factory is None:
        raise ProviderConfigurationError(
            f"Unknown provider type '{provider_type}' for provider {name}. "
            f"Supported: {', '.join(sorted(PROVIDER_TYPES))}",
            provider=name,
        )
    return factory(name, config)


def build_registry(options: AIServiceOptions) -> ProviderRegistry:
    """Construct every configured provider and wrap them in a registry."""
    providers = [
        create_provider(name, config)
        for name, config in options.providers.items()
    ]
    registry = ProviderRegistry(providers)

    if options.default_provider not in registry:
        logger.warning(
            "default_provider_not_registered",
            extra={
                "provider": options.default_provider,
                "registered": list(registry),
            },
        )

    logger.info(
        "provider_registry_built",
        extra={"count": len(registry), "providers": list(registry)},
    )
    return registry
