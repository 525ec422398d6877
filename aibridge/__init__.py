"""
AI Bridge — one async facade over several AI providers.

Chat, embeddings, vision and a vector store behind provider-neutral
services. Providers (OpenAI, Ollama, Anthropic) are built from a YAML
configuration tree and selected by name per call.
"""

from aibridge.bootstrap import AIBridge, create_ai_bridge
from aibridge.config import AIServiceOptions, load_options
from aibridge.services import AIService

__version__ = "0.1.0"

__all__ = [
    "AIBridge",
    "AIService",
    "AIServiceOptions",
    "create_ai_bridge",
    "load_options",
]
