"""
Anthropic provider adapter.

Wraps `anthropic.AsyncAnthropic` (Messages API). Anthropic offers no
embeddings endpoint, so get_embedding_generator() returns None and the
embedding facade raises GeneratorUnavailableError for this provider.

Config block:
    Anthropic:
      api_key_env: ANTHROPIC_API_KEY
      models: {chat: claude-sonnet-4-20250514}
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Optional

import anthropic

from aibridge.config.schema import ProviderConfiguration
from aibridge.exceptions import BackendError, ProviderConfigurationError
from aibridge.llm.messages import (
    ChatMessage,
    ChatOptions,
    ChatResponse,
    ChatRole,
    DataContent,
    FunctionCallContent,
    FunctionResultContent,
    TextContent,
    UsageDetails,
)
from aibridge.llm.structured import schema_instruction_from_schema
from aibridge.providers.base import AIProvider, ChatClient, EmbeddingGenerator

logger = logging.getLogger(__name__)

# The Messages API requires max_tokens on every request
DEFAULT_MAX_TOKENS = 4096


def to_anthropic_request(
    messages: list[ChatMessage],
) -> tuple[str, list[dict[str, Any]]]:
    """Split out the system prompt and translate the remaining messages."""
    system_parts: list[str] = []
    wire: list[dict[str, Any]] = []

    for message in messages:
        if message.role == ChatRole.SYSTEM:
            system_parts.append(message.text)
            continue

        blocks: list[dict[str, Any]] = []
        for content in message.contents:
            if isinstance(content, TextContent):
                blocks.append({"type": "text", "text": content.text})
            elif isinstance(content, DataContent):
                blocks.append({
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": content.media_type,
                        "data": content.to_base64(),
                    },
                })
            elif isinstance(content, FunctionCallContent):
                blocks.append({
                    "type": "tool_use",
                    "id": content.call_id,
                    "name": content.name,
                    "input": content.arguments,
                })
            elif isinstance(content, FunctionResultContent):
                blocks.append({
                    "type": "tool_result",
                    "tool_use_id": content.call_id,
                    "content": content.result,
                    "is_error": content.is_error,
                })

        # Tool results travel in user turns
        role = "assistant" if message.role == ChatRole.ASSISTANT else "user"
        wire.append({"role": role, "content": blocks})

    return "\n\n".join(p for p in system_parts if p), wire


def _request_kwargs(
    model: str,
    messages: list[ChatMessage],
    options: Optional[ChatOptions],
) -> dict[str, Any]:
    system_prompt, wire = to_anthropic_request(messages)
    options = options or ChatOptions()

    if options.response_schema is not None:
        system_prompt += schema_instruction_from_schema(options.response_schema)

    kwargs: dict[str, Any] = {
        "model": model,
        "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
        "messages": wire,
    }
    if system_prompt:
        kwargs["system"] = system_prompt.strip()
    if options.temperature is not None:
        # Anthropic caps temperature at 1.0
        kwargs["temperature"] = min(options.temperature, 1.0)
    if options.tools:
        kwargs["tools"] = [t.to_anthropic() for t in options.tools]
    return kwargs


def _backend_error(provider: str, error: Exception) -> BackendError:
    return BackendError(
        f"Anthropic request failed: {error}",
        provider=provider,
        status_code=getattr(error, "status_code", None),
    )


class AnthropicChatClient(ChatClient):
    """Messages API bound to one model."""

    def __init__(self, provider_name: str, model: str, client: Any):
        super().__init__(provider_name, model)
        self._client = client

    async def get_response(
        self,
        messages: list[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ChatResponse:
        try:
            response = await self._client.messages.create(
                **_request_kwargs(self.model, messages, options)
            )
        except anthropic.AnthropicError as e:
            raise _backend_error(self.provider_name, e) from e

        contents: list[Any] = []
        for block in response.content:
            block_type = getattr(block, "type", None)
            if block_type == "text":
                contents.append(TextContent(block.text))
            elif block_type == "tool_use":
                contents.append(FunctionCallContent(
                    call_id=block.id,
                    name=block.name,
                    arguments=block.input if isinstance(block.input, dict) else {},
                ))

        return ChatResponse(
            messages=[ChatMessage(ChatRole.ASSISTANT, contents)] if contents else [],
            model_id=getattr(response, "model", None) or self.model,
            finish_reason=getattr(response, "stop_reason", "") or "",
            usage=UsageDetails(
                input_tokens=getattr(response.usage, "input_tokens", 0),
                output_tokens=getattr(response.usage, "output_tokens", 0),
            ),
            raw_response=response,
        )

    async def get_streaming_response(
        self,
        messages: list[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> AsyncIterator[str]:
        try:
            async with self._client.messages.stream(
                **_request_kwargs(self.model, messages, options)
            ) as stream:
                async for text in stream.text_stream:
                    if text:
                        yield text
        except anthropic.AnthropicError as e:
            raise _backend_error(self.provider_name, e) from e


class AnthropicProvider(AIProvider):
    """Anthropic Claude backend (chat only)."""

    supports_functions = True
    supports_vision = True
    supports_streaming = True

    default_chat_model = "claude-sonnet-4-20250514"
    default_embedding_model = None

    def __init__(
        self,
        name: str = "Anthropic",
        config: Optional[ProviderConfiguration] = None,
        client: Any = None,
    ):
        super().__init__(name, config)

        if client is None:
            api_key = self.config.resolve_api_key()
            if not api_key:
                raise ProviderConfigurationError(
                    f"{name} ApiKey is required. Set api_key or api_key_env.",
                    provider=name,
                )
            client = anthropic.AsyncAnthropic(
                api_key=api_key,
                base_url=self.config.endpoint or None,
            )

        self._client = client

    def get_chat_client(self, model_name: Optional[str] = None) -> Optional[ChatClient]:
        return AnthropicChatClient(self.name, self.resolve_chat_model(model_name), self._client)

    def get_embedding_generator(
        self, model_name: Optional[str] = None
    ) -> Optional[EmbeddingGenerator]:
        return None

    async def aclose(self) -> None:
        await self._client.close()
