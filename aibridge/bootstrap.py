"""
Bootstrap — wire configuration into a ready-to-use AIBridge.

Construction order: provider registry (adapters fail fast on bad config),
then the four facades bound to the default provider, then the optional
liveness probe.

Usage:
    from aibridge.bootstrap import create_ai_bridge
    from aibridge.config import load_options

    bridge = create_ai_bridge(load_options("config/ai_bridge.yaml"))
    try:
        reply = await bridge.service.chat.complete("hello")
        result = await bridge.health_check.check_health()
    finally:
        await bridge.aclose()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from aibridge.config.schema import AIServiceOptions
from aibridge.providers.registry import ProviderRegistry, build_registry
from aibridge.services.ai_service import AIService
from aibridge.services.chat import ChatService
from aibridge.services.embeddings import EmbeddingService
from aibridge.services.health import AIServiceHealthCheck
from aibridge.services.vector_store import VectorStoreService
from aibridge.services.vision import VisionService
from aibridge.vectorstore.in_memory import InMemoryVectorStore

logger = logging.getLogger(__name__)


@dataclass
class AIBridge:
    """Everything create_ai_bridge() built, plus the means to release it."""

    service: AIService
    registry: ProviderRegistry
    options: AIServiceOptions
    health_check: Optional[AIServiceHealthCheck] = None

    async def aclose(self) -> None:
        """Close every adapter's native client."""
        await self.registry.aclose()


def create_ai_bridge(
    options: AIServiceOptions,
    *,
    include_health_check: bool = True,
    registry: Optional[ProviderRegistry] = None,
    vector_store: Optional[InMemoryVectorStore] = None,
) -> AIBridge:
    """
    Build the registry, the facades and (optionally) the health probe.

    Args:
        options: Validated configuration tree.
        include_health_check: Attach an AIServiceHealthCheck.
        registry: Pre-built registry; skips adapter construction from options.
        vector_store: Store the vector facade delegates to.

    Raises:
        ProviderConfigurationError: An adapter rejected its config block.
    """
    if registry is None:
        registry = build_registry(options)

    default = options.default_provider
    services = options.services

    service = AIService(
        chat=ChatService(registry, default, services.chat),
        embeddings=EmbeddingService(registry, default, services.embeddings),
        vision=VisionService(registry, default, services.vision),
        vector_store=VectorStoreService(vector_store),
    )

    health_check = AIServiceHealthCheck(service) if include_health_check else None

    logger.info(
        "ai_bridge_created",
        extra={
            "provider": default,
            "count": len(registry),
            "health_check": include_health_check,
        },
    )
    return AIBridge(
        service=service,
        registry=registry,
        options=options,
        health_check=health_check,
    )
