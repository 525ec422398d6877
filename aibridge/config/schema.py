"""
Pydantic configuration schema for AI Bridge.

The whole tree is usually loaded from a YAML file (see loader.py) but can
also be built in code:

    options = AIServiceOptions(
        default_provider="Ollama",
        providers={"Ollama": ProviderConfiguration(endpoint="http://gpu:11434")},
    )

Provider blocks are opaque to the facades; only the adapters read them.
"""

from __future__ import annotations

import os
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator


_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMG]?B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"B": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


def parse_size(value: str) -> int:
    """
    Parse a human size string ("5MB", "512KB", "1024") into bytes.

    Raises ValueError for anything that does not look like a size.
    """
    match = _SIZE_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid size: {value!r}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or "B").upper()])


# ---------------------------------------------------------------------------
# Provider blocks
# ---------------------------------------------------------------------------

class ModelConfiguration(BaseModel):
    """Default model names per capability for one provider."""
    chat: Optional[str] = None
    embeddings: Optional[str] = None
    vision: Optional[str] = None


class ProviderConfiguration(BaseModel):
    """Endpoint, credentials and model defaults for one provider."""
    type: Optional[str] = Field(
        None,
        description="Adapter variant ('openai', 'ollama', 'anthropic'). "
                    "Defaults to the block name lower-cased.",
    )
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    api_key_env: Optional[str] = Field(
        None, description="Env var name holding the API key"
    )
    models: ModelConfiguration = Field(default_factory=ModelConfiguration)
    additional_settings: dict[str, str] = Field(default_factory=dict)

    @field_validator("additional_settings", mode="before")
    @classmethod
    def stringify_settings(cls, v):
        """Accept unquoted YAML scalars (timeout: 120, verbose: true)."""
        if not isinstance(v, dict):
            return v
        return {
            key: str(value).lower() if isinstance(value, bool)
            else str(value) if isinstance(value, (int, float))
            else value
            for key, value in v.items()
        }

    def resolve_api_key(self) -> Optional[str]:
        """Return the literal api_key, else the value of api_key_env."""
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.environ.get(self.api_key_env) or None
        return None


# ---------------------------------------------------------------------------
# Service blocks
# ---------------------------------------------------------------------------

class ChatServiceOptions(BaseModel):
    """Options applied to every chat request made by the chat facade."""
    default_max_tokens: int = Field(4000, ge=1)
    default_temperature: float = Field(0.7, ge=0.0, le=2.0)
    enable_streaming: bool = True
    mark_all_chunks_complete: bool = Field(
        False,
        description="Flag every streamed chunk as complete instead of only the last",
    )


class EmbeddingServiceOptions(BaseModel):
    """Embedding defaults. batch_size is carried but not applied."""
    default_dimensions: int = Field(384, ge=1)
    batch_size: int = Field(100, ge=1)


class VisionServiceOptions(BaseModel):
    """Vision input limits."""
    max_image_size: str = "5MB"
    supported_formats: list[str] = Field(
        default_factory=lambda: ["jpg", "png", "webp"]
    )

    @field_validator("max_image_size")
    @classmethod
    def validate_max_image_size(cls, v: str) -> str:
        parse_size(v)
        return v

    @property
    def max_image_bytes(self) -> int:
        return parse_size(self.max_image_size)


class ServiceConfiguration(BaseModel):
    chat: ChatServiceOptions = Field(default_factory=ChatServiceOptions)
    embeddings: EmbeddingServiceOptions = Field(default_factory=EmbeddingServiceOptions)
    vision: VisionServiceOptions = Field(default_factory=VisionServiceOptions)


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------

class AIServiceOptions(BaseModel):
    """
    Complete configuration for AI Bridge.

    This is the top-level model that gets loaded from the YAML file.
    """
    default_provider: str = "OpenAI"
    providers: dict[str, ProviderConfiguration] = Field(default_factory=dict)
    services: ServiceConfiguration = Field(default_factory=ServiceConfiguration)
