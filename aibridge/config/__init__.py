from aibridge.config.loader import load_options, options_from_dict
from aibridge.config.schema import (
    AIServiceOptions,
    ChatServiceOptions,
    EmbeddingServiceOptions,
    ModelConfiguration,
    ProviderConfiguration,
    ServiceConfiguration,
    VisionServiceOptions,
    parse_size,
)

__all__ = [
    "AIServiceOptions",
    "ChatServiceOptions",
    "EmbeddingServiceOptions",
    "ModelConfiguration",
    "ProviderConfiguration",
    "ServiceConfiguration",
    "VisionServiceOptions",
    "load_options",
    "options_from_dict",
    "parse_size",
]
