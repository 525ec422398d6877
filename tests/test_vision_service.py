"""
Tests for the vision facade.
"""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from aibridge.config.schema import (
    ModelConfiguration,
    ProviderConfiguration,
    VisionServiceOptions,
)
from aibridge.exceptions import (
    ImageTooLargeError,
    ProviderNotFoundError,
    StructuredParseError,
    UnsupportedCapabilityError,
)
from aibridge.llm.messages import ChatRole, DataContent, TextContent
from aibridge.providers.registry import ProviderRegistry
from aibridge.services.vision import VisionService, mime_type_from_path
from tests.conftest import FakeProvider

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class Receipt(BaseModel):
    merchant: str
    total: float


@pytest.fixture
def provider():
    return FakeProvider("Test", reply="A cat on a sofa")


@pytest.fixture
def vision(provider):
    return VisionService(ProviderRegistry([provider]), "Test")


class TestMimeInference:

    @pytest.mark.parametrize("path,expected", [
        ("photo.png", "image/png"),
        ("photo.PNG", "image/png"),
        ("photo.jpg", "image/jpeg"),
        ("photo.JPEG", "image/jpeg"),
        ("photo.webp", "image/webp"),
        ("anim.gif", "image/gif"),
        ("scan.tiff", "image/png"),
        ("noextension", "image/png"),
    ])
    def test_extension_mapping(self, path, expected):
        assert mime_type_from_path(path) == expected


class TestAnalyzeImage:

    @pytest.mark.asyncio
    async def test_bytes_input(self, vision, provider):
        result = await vision.analyze_image(PNG_BYTES, "Describe it")

        assert result.content == "A cat on a sofa"
        assert result.metadata["provider"] == "Test"
        assert result.metadata["model"] == "fake-chat"
        assert result.metadata["input_tokens"] == 10

        [(messages, _)] = provider.chat_clients[0].calls
        assert len(messages) == 2
        assert messages[0].role == ChatRole.USER
        assert messages[0].text == "Describe it"
        [data] = messages[1].contents
        assert isinstance(data, DataContent)
        assert data.data == PNG_BYTES
        assert data.media_type == "image/png"

    @pytest.mark.asyncio
    async def test_explicit_mime_type_for_bytes(self, vision, provider):
        await vision.analyze_image(b"jpeg", "x", mime_type="image/jpeg")
        messages, _ = provider.chat_clients[0].calls[0]
        assert messages[1].contents[0].media_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_configured_vision_model_used(self):
        config = ProviderConfiguration(models=ModelConfiguration(chat="text", vision="llava"))
        provider = FakeProvider("Test", config=config)
        vision = VisionService(ProviderRegistry([provider]), "Test")

        result = await vision.analyze_image(PNG_BYTES, "x")

        assert result.metadata["model"] == "llava"

    @pytest.mark.asyncio
    async def test_selected_model_beats_vision_model(self):
        config = ProviderConfiguration(models=ModelConfiguration(vision="llava"))
        provider = FakeProvider("Test", config=config)
        vision = VisionService(ProviderRegistry([provider]), "Test").with_model("bakllava")

        await vision.analyze_image(PNG_BYTES, "x")

        assert provider.chat_clients[0].model == "bakllava"

    @pytest.mark.asyncio
    async def test_path_input_infers_mime(self, vision, provider, tmp_path):
        image = tmp_path / "shot.WEBP"
        image.write_bytes(b"webpdata")

        await vision.analyze_image(image, "What is this?", mime_type="image/png")

        messages, _ = provider.chat_clients[0].calls[0]
        assert messages[1].contents[0].media_type == "image/webp"
        assert messages[1].contents[0].data == b"webpdata"

    @pytest.mark.asyncio
    async def test_string_path(self, vision, tmp_path):
        image = tmp_path / "a.jpg"
        image.write_bytes(b"jpg")
        result = await vision.analyze_image(str(image), "x")
        assert result.content == "A cat on a sofa"

    @pytest.mark.asyncio
    async def test_missing_file(self, vision, tmp_path):
        with pytest.raises(FileNotFoundError):
            await vision.analyze_image(tmp_path / "nope.png", "x")

    @pytest.mark.asyncio
    async def test_empty_reply_gives_empty_content(self):
        provider = FakeProvider("Test", reply="")
        vision = VisionService(ProviderRegistry([provider]), "Test")
        result = await vision.analyze_image(PNG_BYTES, "x")
        assert result.content == ""

    @pytest.mark.asyncio
    async def test_image_too_large(self, provider):
        vision = VisionService(
            ProviderRegistry([provider]), "Test", VisionServiceOptions(max_image_size="16B")
        )
        with pytest.raises(ImageTooLargeError):
            await vision.analyze_image(PNG_BYTES, "x")
        assert provider.chat_clients == []

    @pytest.mark.asyncio
    async def test_unknown_provider(self, vision):
        with pytest.raises(ProviderNotFoundError):
            await vision.with_provider("Nope").analyze_image(PNG_BYTES, "x")


class TestVisionCapabilityGate:
    """Provider without vision: error raised, no client ever created."""

    @pytest.mark.asyncio
    async def test_analyze_image_rejected(self):
        provider = FakeProvider("Test", supports_vision=False)
        vision = VisionService(ProviderRegistry([provider]), "Test")

        with pytest.raises(UnsupportedCapabilityError) as exc:
            await vision.analyze_image(PNG_BYTES, "x")

        assert exc.value.capability == "vision"
        assert provider.chat_clients == []
        assert provider.request_count == 0

    @pytest.mark.asyncio
    async def test_checked_before_file_read(self, tmp_path):
        provider = FakeProvider("Test", supports_vision=False)
        vision = VisionService(ProviderRegistry([provider]), "Test")

        with pytest.raises(UnsupportedCapabilityError):
            await vision.analyze_image(tmp_path / "does-not-exist.png", "x")

    @pytest.mark.asyncio
    async def test_structured_rejected(self):
        provider = FakeProvider("Test", supports_vision=False)
        vision = VisionService(ProviderRegistry([provider]), "Test")

        with pytest.raises(UnsupportedCapabilityError):
            await vision.analyze_image_structured(PNG_BYTES, "x", Receipt)
        assert provider.chat_clients == []


class TestAnalyzeImageStructured:

    @pytest.mark.asyncio
    async def test_prompt_guided_by_default(self):
        provider = FakeProvider("Test", reply='{"merchant": "Cafe", "total": 12.5}')
        vision = VisionService(ProviderRegistry([provider]), "Test")

        receipt = await vision.analyze_image_structured(PNG_BYTES, "Extract", Receipt)

        assert receipt == Receipt(merchant="Cafe", total=12.5)
        [(messages, options)] = provider.chat_clients[0].calls
        assert len(messages) == 1
        parts = messages[0].contents
        assert isinstance(parts[0], TextContent)
        assert isinstance(parts[1], DataContent)
        assert "schema" in parts[-1].text
        assert options.response_schema is None

    @pytest.mark.asyncio
    async def test_json_schema_flag(self):
        provider = FakeProvider("Test", reply='{"merchant": "Cafe", "total": 1}')
        vision = VisionService(ProviderRegistry([provider]), "Test")

        await vision.analyze_image_structured(PNG_BYTES, "x", Receipt, use_json_schema=True)

        _, options = provider.chat_clients[0].calls[0]
        assert options.response_schema_name == "Receipt"

    @pytest.mark.asyncio
    async def test_parse_failure(self):
        provider = FakeProvider("Test", reply="a receipt from a cafe")
        vision = VisionService(ProviderRegistry([provider]), "Test")

        with pytest.raises(StructuredParseError):
            await vision.analyze_image_structured(PNG_BYTES, "x", Receipt)
