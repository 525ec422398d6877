"""
LLM data layer — provider-neutral chat types shared by all adapters.

Modules:
- messages: ChatMessage, content parts, ChatResponse, streaming/vision records
- tools: ToolDefinition — function calling schema translation
- structured: JSON schema prompts and typed reply parsing
"""
