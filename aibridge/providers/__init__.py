"""
Provider adapters — one per AI backend, plus the registry that holds them.

Modules:
- base: AIProvider, ChatClient, EmbeddingGenerator abstractions
- openai_provider: OpenAI / OpenAI-compatible servers
- ollama_provider: Ollama REST API via httpx
- anthropic_provider: Anthropic Messages API (chat only)
- registry: ProviderRegistry and config-driven construction
"""
