"""
OpenAI provider adapter.

Wraps `openai.AsyncOpenAI`. Any OpenAI-compatible server can be targeted
by setting `endpoint` (it becomes the SDK base_url).

Config block:
    OpenAI:
      api_key_env: OPENAI_API_KEY
      endpoint: https://api.openai.com/v1      # optional
      models: {chat: gpt-4o-mini, embeddings: text-embedding-3-small}
      additional_settings: {organization: org-123}
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, AsyncIterator, Optional

import openai

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
from aibridge.providers.base import AIProvider, ChatClient, EmbeddingGenerator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Wire translation
# ---------------------------------------------------------------------------

def to_openai_messages(messages: list[ChatMessage]) -> list[dict[str, Any]]:
    """Translate ChatMessages to the Chat Completions message list."""
    wire: list[dict[str, Any]] = []

    for message in messages:
        parts: list[dict[str, Any]] = []
        tool_calls: list[dict[str, Any]] = []

        for content in message.contents:
            if isinstance(content, TextContent):
                parts.append({"type": "text", "text": content.text})
            elif isinstance(content, DataContent):
                parts.append({
                    "type": "image_url",
                    "image_url": {"url": content.to_data_uri()},
                })
            elif isinstance(content, FunctionCallContent):
                tool_calls.append({
                    "id": content.call_id,
                    "type": "function",
                    "function": {
                        "name": content.name,
                        "arguments": json.dumps(content.arguments),
                    },
                })
            elif isinstance(content, FunctionResultContent):
                # Tool results are separate messages in OpenAI's format
                wire.append({
                    "role": "tool",
                    "tool_call_id": content.call_id,
                    "content": content.result,
                })

        if not parts and not tool_calls:
            continue

        entry: dict[str, Any] = {"role": message.role.value}
        if parts and all(p["type"] == "text" for p in parts):
            entry["content"] = "".join(p["text"] for p in parts)
        else:
            entry["content"] = parts or None
        if tool_calls:
            entry["tool_calls"] = tool_calls
        wire.append(entry)

    return wire


def _request_kwargs(
    model: str,
    messages: list[ChatMessage],
    options: Optional[ChatOptions],
) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": to_openai_messages(messages),
    }
    if options is None:
        return kwargs

    if options.max_tokens is not None:
        kwargs["max_tokens"] = options.max_tokens
    if options.temperature is not None:
        kwargs["temperature"] = options.temperature
    if options.tools:
        kwargs["tools"] = [t.to_openai() for t in options.tools]
    if options.response_schema is not None:
        kwargs["response_format"] = {
            "type": "json_schema",
            "json_schema": {
                "name": options.response_schema_name,
                "schema": options.response_schema,
                "strict": False,
            },
        }
    return kwargs


def _backend_error(provider: str, error: Exception) -> BackendError:
    return BackendError(
        f"OpenAI request failed: {error}",
        provider=provider,
        status_code=getattr(error, "status_code", None),
    )


# ---------------------------------------------------------------------------
# Capability objects
# ---------------------------------------------------------------------------

class OpenAIChatClient(ChatClient):
    """Chat Completions API bound to one model."""

    def __init__(self, provider_name: str, model: str, client: Any):
        super().__init__(provider_name, model)
        self._client = client

    async def get_response(
        self,
        messages: list[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ChatResponse:
        start = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                **_request_kwargs(self.model, messages, options)
            )
        except openai.OpenAIError as e:
            raise _backend_error(self.provider_name, e) from e

        choice = response.choices[0] if response.choices else None
        contents: list[Any] = []
        finish_reason = ""

        if choice is not None:
            finish_reason = choice.finish_reason or ""
            if choice.message.content:
                contents.append(TextContent(choice.message.content))
            for call in choice.message.tool_calls or []:
                try:
                    arguments = json.loads(call.function.arguments or "{}")
                except json.JSONDecodeError:
                    arguments = {}
                contents.append(FunctionCallContent(
                    call_id=call.id,
                    name=call.function.name,
                    arguments=arguments if isinstance(arguments, dict) else {},
                ))

        usage = response.usage
        result = ChatResponse(
            messages=[ChatMessage(ChatRole.ASSISTANT, contents)] if contents else [],
            model_id=getattr(response, "model", None) or self.model,
            finish_reason=finish_reason,
            usage=UsageDetails(
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
            ),
            raw_response=response,
        )

        logger.debug(
            "openai_chat_response",
            extra={
                "provider": self.provider_name,
                "model": self.model,
                "duration_ms": round((time.monotonic() - start) * 1000, 1),
            },
        )
        return result

    async def get_streaming_response(
        self,
        messages: list[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> AsyncIterator[str]:
        try:
            stream = await self._client.chat.completions.create(
                stream=True,
                **_request_kwargs(self.model, messages, options),
            )
        except openai.OpenAIError as e:
            raise _backend_error(self.provider_name, e) from e

        try:
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except openai.OpenAIError as e:
            raise _backend_error(self.provider_name, e) from e
        finally:
            await stream.close()


class OpenAIEmbeddingGenerator(EmbeddingGenerator):
    """Embeddings API bound to one model."""

    def __init__(self, provider_name: str, model: str, client: Any):
        super().__init__(provider_name, model)
        self._client = client

    async def generate(self, texts: list[str]) -> list[list[float]]:
        try:
            response = await self._client.embeddings.create(
                model=self.model,
                input=texts,
            )
        except openai.OpenAIError as e:
            raise _backend_error(self.provider_name, e) from e

        # The API reports an index per item; order by it rather than trusting position
        items = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in items]


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------

class OpenAIProvider(AIProvider):
    """OpenAI (or OpenAI-compatible) backend."""

    supports_functions = True
    supports_vision = True
    supports_streaming = True

    default_chat_model = "gpt-4"
    default_embedding_model = "text-embedding-3-small"

    def __init__(
        self,
        name: str = "OpenAI",
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
            client = openai.AsyncOpenAI(
                api_key=api_key,
                base_url=self.config.endpoint or None,
                organization=self.config.additional_settings.get("organization"),
            )

        self._client = client

    def get_chat_client(self, model_name: Optional[str] = None) -> Optional[ChatClient]:
        return OpenAIChatClient(self.name, self.resolve_chat_model(model_name), self._client)

    def get_embedding_generator(
        self, model_name: Optional[str] = None
    ) -> Optional[EmbeddingGenerator]:
        return OpenAIEmbeddingGenerator(
            self.name, self.resolve_embedding_model(model_name), self._client
        )

    async def aclose(self) -> None:
        await self._client.close()
