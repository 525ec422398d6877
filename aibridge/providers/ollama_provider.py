"""
Ollama provider adapter.

Talks to a local (or remote) Ollama server over its REST API with httpx:
- POST /api/chat   (stream false → one JSON body; stream true → NDJSON lines)
- POST /api/embed  (batch embeddings)

Function calling is not advertised: tool support varies too much across
Ollama-served models.

Config block:
    Ollama:
      endpoint: http://localhost:11434
      models: {chat: llama3.2, embeddings: all-minilm}
      additional_settings: {timeout: 120, keep_alive: 5m}
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional

import httpx

from aibridge.config.schema import ProviderConfiguration
from aibridge.exceptions import BackendError
from aibridge.llm.messages import (
    ChatMessage,
    ChatOptions,
    ChatResponse,
    ChatRole,
    DataContent,
    FunctionResultContent,
    TextContent,
    UsageDetails,
)
from aibridge.providers.base import AIProvider, ChatClient, EmbeddingGenerator

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:11434"
DEFAULT_TIMEOUT_SECONDS = 120.0


def to_ollama_messages(messages: list[ChatMessage]) -> list[dict[str, Any]]:
    """Translate ChatMessages to Ollama's /api/chat message list."""
    wire: list[dict[str, Any]] = []
    for message in messages:
        text_parts: list[str] = []
        images: list[str] = []
        for content in message.contents:
            if isinstance(content, TextContent):
                text_parts.append(content.text)
            elif isinstance(content, DataContent):
                images.append(content.to_base64())
            elif isinstance(content, FunctionResultContent):
                wire.append({"role": "tool", "content": content.result})

        if not text_parts and not images:
            continue

        entry: dict[str, Any] = {
            "role": message.role.value,
            "content": "".join(text_parts),
        }
        if images:
            entry["images"] = images
        wire.append(entry)
    return wire


def _chat_payload(
    model: str,
    messages: list[ChatMessage],
    options: Optional[ChatOptions],
    stream: bool,
    keep_alive: Optional[str],
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "model": model,
        "messages": to_ollama_messages(messages),
        "stream": stream,
    }
    if keep_alive:
        payload["keep_alive"] = keep_alive
    if options is not None:
        model_options: dict[str, Any] = {}
        if options.temperature is not None:
            model_options["temperature"] = options.temperature
        if options.max_tokens is not None:
            model_options["num_predict"] = options.max_tokens
        if model_options:
            payload["options"] = model_options
        if options.response_schema is not None:
            payload["format"] = options.response_schema
    return payload


def _backend_error(provider: str, error: httpx.HTTPError) -> BackendError:
    status_code = None
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
    return BackendError(
        f"Ollama request failed: {error}",
        provider=provider,
        status_code=status_code,
    )


def _decode(provider: str, raw: str) -> dict[str, Any]:
    """Parse one JSON object from a reply body or NDJSON line."""
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise BackendError(
            f"Ollama returned malformed JSON: {raw[:200]!r}", provider=provider
        ) from e
    if not isinstance(data, dict):
        raise BackendError(
            f"Ollama returned {type(data).__name__}, expected an object", provider=provider
        )
    return data


class OllamaChatClient(ChatClient):
    """/api/chat bound to one model."""

    def __init__(
        self,
        provider_name: str,
        model: str,
        http: httpx.AsyncClient,
        keep_alive: Optional[str] = None,
    ):
        super().__init__(provider_name, model)
        self._http = http
        self._keep_alive = keep_alive

    async def get_response(
        self,
        messages: list[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> ChatResponse:
        payload = _chat_payload(self.model, messages, options, False, self._keep_alive)
        try:
            resp = await self._http.post("/api/chat", json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise _backend_error(self.provider_name, e) from e

        data = _decode(self.provider_name, resp.text)
        text = data.get("message", {}).get("content", "")

        return ChatResponse(
            messages=[ChatMessage(ChatRole.ASSISTANT, text)] if text else [],
            model_id=data.get("model", self.model),
            finish_reason=data.get("done_reason", ""),
            usage=UsageDetails(
                input_tokens=data.get("prompt_eval_count", 0),
                output_tokens=data.get("eval_count", 0),
            ),
            raw_response=data,
        )

    async def get_streaming_response(
        self,
        messages: list[ChatMessage],
        options: Optional[ChatOptions] = None,
    ) -> AsyncIterator[str]:
        payload = _chat_payload(self.model, messages, options, True, self._keep_alive)
        try:
            async with self._http.stream("POST", "/api/chat", json=payload) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    data = _decode(self.provider_name, line)
                    if "error" in data:
                        raise BackendError(
                            f"Ollama stream error: {data['error']}",
                            provider=self.provider_name,
                        )

                    text = data.get("message", {}).get("content", "")
                    if text:
                        yield text
                    if data.get("done", False):
                        break
        except httpx.HTTPError as e:
            raise _backend_error(self.provider_name, e) from e


class OllamaEmbeddingGenerator(EmbeddingGenerator):
    """/api/embed bound to one model."""

    def __init__(self, provider_name: str, model: str, http: httpx.AsyncClient):
        super().__init__(provider_name, model)
        self._http = http

    async def generate(self, texts: list[str]) -> list[list[float]]:
        try:
            resp = await self._http.post(
                "/api/embed",
                json={"model": self.model, "input": texts},
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise _backend_error(self.provider_name, e) from e

        data = _decode(self.provider_name, resp.text)
        return [list(vector) for vector in data.get("embeddings", [])]


class OllamaProvider(AIProvider):
    """Locally hosted Ollama server."""

    supports_functions = False
    supports_vision = True
    supports_streaming = True

    default_chat_model = "llama3.2"
    default_embedding_model = "all-minilm"

    def __init__(
        self,
        name: str = "Ollama",
        config: Optional[ProviderConfiguration] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(name, config)
        self.endpoint = (self.config.endpoint or DEFAULT_ENDPOINT).rstrip("/")

        settings = self.config.additional_settings
        self._keep_alive = settings.get("keep_alive")

        if http_client is None:
            timeout = float(settings.get("timeout", DEFAULT_TIMEOUT_SECONDS))
            http_client = httpx.AsyncClient(base_url=self.endpoint, timeout=timeout)
        self._http = http_client

    def get_chat_client(self, model_name: Optional[str] = None) -> Optional[ChatClient]:
        return OllamaChatClient(
            self.name, self.resolve_chat_model(model_name), self._http, self._keep_alive
        )

    def get_embedding_generator(
        self, model_name: Optional[str] = None
    ) -> Optional[EmbeddingGenerator]:
        return OllamaEmbeddingGenerator(
            self.name, self.resolve_embedding_model(model_name), self._http
        )

    async def aclose(self) -> None:
        await self._http.aclose()
