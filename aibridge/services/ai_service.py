"""
AIService — one instance of each facade, shared by the whole process.

Holds no state of its own. Selection changes go through the facades'
with_* methods, which return scoped copies, so the shared instance is
never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass

from aibridge.services.chat import ChatService
from aibridge.services.embeddings import EmbeddingService
from aibridge.services.vector_store import VectorStoreService
from aibridge.services.vision import VisionService


@dataclass(frozen=True)
class AIService:
    """Aggregate of the chat, embedding, vision and vector store facades."""

    chat: ChatService
    embeddings: EmbeddingService
    vision: VisionService
    vector_store: VectorStoreService
