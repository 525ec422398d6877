"""
Chat Service — provider-neutral chat completions.

Resolves the selected provider from the registry, asks it for a chat
client bound to the selected model, forwards the request and returns the
normalized ChatResponse. No retries, no fallback: errors from the client
propagate as BackendError, selection problems are raised before any
network call.

Usage:
    response = await ai.chat.complete("Summarize RFC 2119 in one line.")
    print(response.text)

    async for chunk in ai.chat.with_provider("Ollama").complete_streaming("Tell a joke"):
        print(chunk.content, end="", flush=True)

    class Verdict(BaseModel):
        label: str
        confidence: float

    verdict = await ai.chat.complete_structured("Is 'great product!' positive?", Verdict)
"""

from __future__ import annotations

import copy
import logging
import time
from typing import AsyncIterator, Iterable, Optional, TypeVar

from pydantic import BaseModel

from aibridge.config.schema import ChatServiceOptions
from aibridge.exceptions import ClientUnavailableError, UnsupportedCapabilityError
from aibridge.llm.messages import (
    ChatMessage,
    ChatOptions,
    ChatResponse,
    StreamingChatResponse,
    TextContent,
    as_messages,
)
from aibridge.llm.structured import parse_structured, schema_for, schema_instruction
from aibridge.llm.tools import ToolDefinition
from aibridge.providers.base import AIProvider, ChatClient
from aibridge.providers.registry import ProviderRegistry
from aibridge.services.base import ProviderSelection

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


async def get_structured_response(
    client: ChatClient,
    messages: list[ChatMessage],
    result_type: type[T],
    *,
    use_json_schema: bool,
    options: Optional[ChatOptions] = None,
) -> T:
    """
    Request a reply parseable into result_type and parse it.

    With use_json_schema the schema is sent as a response format; otherwise
    it is appended to the last message as an instruction.

    Raises:
        StructuredParseError: If the reply does not validate.
    """
    options = copy.copy(options) if options is not None else ChatOptions()

    if use_json_schema:
        options.response_schema = schema_for(result_type)
        options.response_schema_name = result_type.__name__
    else:
        last = messages[-1]
        guided = ChatMessage(
            last.role,
            last.contents + [TextContent(schema_instruction(result_type))],
        )
        messages = messages[:-1] + [guided]

    response = await client.get_response(messages, options)
    return parse_structured(response.text, result_type)


class ChatService(ProviderSelection):
    """
    Chat facade over the provider registry.

    Immutable: with_provider / with_model / with_options return copies.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        default_provider: str,
        options: Optional[ChatServiceOptions] = None,
        model_name: Optional[str] = None,
    ):
        super().__init__(registry, default_provider, model_name)
        self._options = options or ChatServiceOptions()

    @property
    def options(self) -> ChatServiceOptions:
        return self._options

    def with_options(self, options: ChatServiceOptions) -> ChatService:
        """Return a copy using different chat options."""
        scoped = copy.copy(self)
        scoped._options = options
        return scoped

    # --- Resolution ---

    def _get_client(self, provider: AIProvider) -> ChatClient:
        client = provider.get_chat_client(self._model_name)
        if client is None:
            raise ClientUnavailableError(provider.name, model=self._model_name)
        return client

    def _request_options(self) -> ChatOptions:
        return ChatOptions(
            max_tokens=self._options.default_max_tokens,
            temperature=self._options.default_temperature,
        )

    def _log_completed(
        self, operation: str, client: ChatClient, start: float, response: ChatResponse
    ) -> None:
        logger.info(
            "chat_completed",
            extra={
                "operation": operation,
                "provider": client.provider_name,
                "model": client.model,
                "tokens": response.usage.total_tokens,
                "duration_ms": round((time.monotonic() - start) * 1000, 1),
            },
        )

    # --- Main Chat API ---

    async def complete(
        self, prompt_or_messages: str | ChatMessage | list[ChatMessage]
    ) -> ChatResponse:
        """
        Send one chat request.

        A bare string is treated as a single user message.

        Raises:
            ProviderNotFoundError: Selected provider is not registered.
            ClientUnavailableError: Provider returned no chat client.
            BackendError: The provider call failed.
        """
        provider = self._get_provider()
        client = self._get_client(provider)

        start = time.monotonic()
        response = await client.get_response(
            as_messages(prompt_or_messages), self._request_options()
        )
        self._log_completed("complete", client, start, response)
        return response

    async def complete_streaming(self, prompt: str) -> AsyncIterator[StreamingChatResponse]:
        """
        Stream a completion in arrival order.

        Only the last chunk carries is_complete=True (one-chunk lookahead),
        unless options.mark_all_chunks_complete is set, in which case every
        chunk is flagged complete. With enable_streaming off, one
        non-streaming request is made and yielded as a single chunk.
        """
        provider = self._get_provider()
        if not provider.supports_streaming:
            raise UnsupportedCapabilityError(provider.name, "streaming")

        client = self._get_client(provider)
        messages = as_messages(prompt)

        if not self._options.enable_streaming:
            response = await client.get_response(messages, self._request_options())
            yield StreamingChatResponse(response.text, is_complete=True)
            return

        stream = client.get_streaming_response(messages, self._request_options())
        mark_all = self._options.mark_all_chunks_complete
        pending: Optional[str] = None
        chunk_count = 0

        try:
            async for fragment in stream:
                chunk_count += 1
                if mark_all:
                    yield StreamingChatResponse(fragment, is_complete=True)
                    continue
                if pending is not None:
                    yield StreamingChatResponse(pending, is_complete=False)
                pending = fragment

            if pending is not None:
                yield StreamingChatResponse(pending, is_complete=True)
        finally:
            await stream.aclose()

        logger.info(
            "chat_stream_completed",
            extra={
                "provider": client.provider_name,
                "model": client.model,
                "count": chunk_count,
            },
        )

    async def complete_structured(self, prompt: str, result_type: type[T]) -> T:
        """
        Typed completion, always JSON-schema guided.

        Raises:
            StructuredParseError: If the reply cannot be parsed.
        """
        return await self.complete_structured_with_schema_flag(
            prompt, result_type, use_json_schema=True
        )

    async def complete_structured_with_schema_flag(
        self,
        prompt: str,
        result_type: type[T],
        use_json_schema: bool = False,
    ) -> T:
        """
        Typed completion; prompt-guided unless use_json_schema is set.

        Raises:
            StructuredParseError: If the reply cannot be parsed.
        """
        provider = self._get_provider()
        client = self._get_client(provider)

        result = await get_structured_response(
            client,
            as_messages(prompt),
            result_type,
            use_json_schema=use_json_schema,
            options=self._request_options(),
        )
        logger.info(
            "chat_structured_completed",
            extra={
                "provider": client.provider_name,
                "model": client.model,
                "result_type": result_type.__name__,
                "json_schema": use_json_schema,
            },
        )
        return result

    async def complete_with_functions(
        self,
        messages: list[ChatMessage],
        tools: Iterable[ToolDefinition],
    ) -> ChatResponse:
        """
        Send a request with tools attached.

        The response may contain FunctionCallContent parts; running the
        tools and replying with results is the caller's job.

        Raises:
            UnsupportedCapabilityError: Provider does not support functions.
        """
        provider = self._get_provider()
        if not provider.supports_functions:
            raise UnsupportedCapabilityError(provider.name, "function calling")

        client = self._get_client(provider)
        options = self._request_options()
        options.tools = list(tools)

        start = time.monotonic()
        response = await client.get_response(list(messages), options)
        self._log_completed("complete_with_functions", client, start, response)
        return response
