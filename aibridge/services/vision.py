"""
Vision Service — image analysis through vision-capable chat models.

Builds a multimodal message set (text prompt + image bytes tagged with a
MIME type) and sends it through the selected provider's chat client.

Usage:
    result = await ai.vision.analyze_image("/tmp/screenshot.png", "Describe the layout.")
    print(result.content)

    result = await ai.vision.analyze_image(jpeg_bytes, "Read the sign.", mime_type="image/jpeg")

    class Receipt(BaseModel):
        merchant: str
        total: float

    receipt = await ai.vision.analyze_image_structured("receipt.jpg", "Extract it.", Receipt)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, TypeVar, Union

from pydantic import BaseModel

from aibridge.config.schema import VisionServiceOptions
from aibridge.exceptions import (
    ClientUnavailableError,
    ImageTooLargeError,
    UnsupportedCapabilityError,
)
from aibridge.llm.messages import (
    ChatMessage,
    ChatRole,
    DataContent,
    TextContent,
    VisionResponse,
)
from aibridge.providers.base import AIProvider, ChatClient
from aibridge.providers.registry import ProviderRegistry
from aibridge.services.base import ProviderSelection
from aibridge.services.chat import get_structured_response

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

ImageInput = Union[str, Path, bytes, bytearray]

DEFAULT_MIME_TYPE = "image/png"

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


def mime_type_from_path(path: str | Path) -> str:
    """MIME type from the file extension (case-insensitive), default image/png."""
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


class VisionService(ProviderSelection):
    """Vision facade over the provider registry."""

    def __init__(
        self,
        registry: ProviderRegistry,
        default_provider: str,
        options: Optional[VisionServiceOptions] = None,
        model_name: Optional[str] = None,
    ):
        super().__init__(registry, default_provider, model_name)
        self._options = options or VisionServiceOptions()

    @property
    def options(self) -> VisionServiceOptions:
        return self._options

    # --- Resolution ---

    def _get_vision_provider(self) -> AIProvider:
        provider = self._get_provider()
        if not provider.supports_vision:
            raise UnsupportedCapabilityError(provider.name, "vision")
        return provider

    def _get_client(self, provider: AIProvider) -> ChatClient:
        # selected model, then the provider's vision model, then its chat model
        model_name = self._model_name or provider.config.models.vision
        client = provider.get_chat_client(model_name)
        if client is None:
            raise ClientUnavailableError(provider.name, model=model_name)
        return client

    def _load_image(self, image: ImageInput, mime_type: str) -> tuple[bytes, str]:
        """Read a path (inferring its MIME type) or pass bytes through."""
        if isinstance(image, (bytes, bytearray)):
            data, media_type = bytes(image), mime_type
        else:
            path = Path(image)
            if not path.exists():
                raise FileNotFoundError(f"Image not found: {path}")
            data, media_type = path.read_bytes(), mime_type_from_path(path)

        limit = self._options.max_image_bytes
        if len(data) > limit:
            raise ImageTooLargeError(len(data), limit)
        return data, media_type

    # --- Main Vision API ---

    async def analyze_image(
        self,
        image: ImageInput,
        prompt: str,
        mime_type: str = DEFAULT_MIME_TYPE,
    ) -> VisionResponse:
        """
        Analyze an image given as a file path or raw bytes.

        For paths the MIME type comes from the extension and `mime_type`
        is ignored.

        Raises:
            UnsupportedCapabilityError: Provider lacks vision (checked first).
            FileNotFoundError: Path does not exist.
            ImageTooLargeError: Image exceeds max_image_size.
        """
        provider = self._get_vision_provider()
        data, media_type = self._load_image(image, mime_type)
        client = self._get_client(provider)

        messages = [
            ChatMessage(ChatRole.USER, prompt),
            ChatMessage(ChatRole.USER, [DataContent(data, media_type)]),
        ]

        response = await client.get_response(messages)

        logger.info(
            "vision_analysis_complete",
            extra={
                "provider": client.provider_name,
                "model": client.model,
                "format": media_type,
                "size_kb": len(data) // 1024,
                "tokens": response.usage.total_tokens,
            },
        )

        return VisionResponse(
            content=response.text,
            metadata={
                "provider": client.provider_name,
                "model": response.model_id or client.model,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )

    async def analyze_image_structured(
        self,
        image: ImageInput,
        prompt: str,
        result_type: type[T],
        use_json_schema: bool = False,
        mime_type: str = DEFAULT_MIME_TYPE,
    ) -> T:
        """
        Analyze an image and parse the reply into result_type.

        Raises:
            UnsupportedCapabilityError: Provider lacks vision (checked first).
            StructuredParseError: If the reply cannot be parsed.
        """
        provider = self._get_vision_provider()
        data, media_type = self._load_image(image, mime_type)
        client = self._get_client(provider)

        message = ChatMessage(
            ChatRole.USER,
            [TextContent(prompt), DataContent(data, media_type)],
        )

        result = await get_structured_response(
            client, [message], result_type, use_json_schema=use_json_schema
        )
        logger.info(
            "vision_structured_complete",
            extra={
                "provider": client.provider_name,
                "model": client.model,
                "result_type": result_type.__name__,
            },
        )
        return result
