"""
Custom exception hierarchy for AI Bridge.

Structured error handling with clear categories:
- Configuration errors (caught at startup)
- Selection errors (unknown provider, no client for a model)
- Capability errors (provider lacks functions/vision/streaming)
- Structured output parse failures
- Backend failures (provider SDK / network errors, passed through)

Nothing here is retried. Every error surfaces to the caller as-is.

Usage:
    from aibridge.exceptions import AIBridgeError, BackendError

    try:
        response = await ai.chat.complete("hello")
    except BackendError as e:
        logger.warning("backend down: %s (%s)", e, e.provider)
"""

from __future__ import annotations

from typing import Optional


class AIBridgeError(Exception):
    """
    Base exception for all AI Bridge errors.

    All custom exceptions inherit from this, so you can catch
    `AIBridgeError` to handle any facade-level error.
    """

    def __init__(self, message: str, *, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


# ── Configuration Errors ──────────────────────────────────────────


class ProviderConfigurationError(AIBridgeError):
    """
    Raised when a provider block is invalid at construction time.

    Examples:
    - API key missing for a credentialed provider
    - Unknown provider type
    - Two adapters registered under the same name
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.provider = provider


# ── Selection Errors ──────────────────────────────────────────────


class ProviderNotFoundError(AIBridgeError):
    """Raised when the selected provider name has no registered adapter."""

    def __init__(self, provider: str, *, details: Optional[dict] = None):
        super().__init__(f"Provider {provider} not found", details=details)
        self.provider = provider


class ClientUnavailableError(AIBridgeError):
    """Raised when an adapter cannot produce a chat client for a model."""

    def __init__(
        self,
        provider: str,
        *,
        model: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(
            f"Chat client not available for provider {provider}",
            details=details,
        )
        self.provider = provider
        self.model = model


class GeneratorUnavailableError(AIBridgeError):
    """Raised when an adapter cannot produce an embedding generator."""

    def __init__(
        self,
        provider: str,
        *,
        model: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(
            f"Embedding generator not available for provider {provider}",
            details=details,
        )
        self.provider = provider
        self.model = model


# ── Capability Errors ─────────────────────────────────────────────


class UnsupportedCapabilityError(AIBridgeError):
    """
    Raised when an operation needs a capability the provider lacks.

    Always raised before any client is created or request is sent.
    """

    def __init__(
        self,
        provider: str,
        capability: str,
        *,
        details: Optional[dict] = None,
    ):
        super().__init__(
            f"Provider {provider} does not support {capability}",
            details=details,
        )
        self.provider = provider
        self.capability = capability


# ── Structured Output ─────────────────────────────────────────────


class StructuredParseError(AIBridgeError):
    """
    Raised when a backend reply cannot be coerced into the requested shape.

    `raw_text` holds the unparsed reply for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        raw_text: str = "",
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.raw_text = raw_text


# ── Backend Errors ────────────────────────────────────────────────


class BackendError(AIBridgeError):
    """
    Raised when a provider SDK or HTTP call fails.

    The original exception is chained (`raise ... from e`) so callers
    can still inspect the SDK error. No retry has been attempted.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.provider = provider
        self.status_code = status_code


# ── Vector Store / Vision Input ───────────────────────────────────


class VectorStoreError(AIBridgeError):
    """Raised when reading from or writing to a vector collection fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        collection: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.operation = operation
        self.collection = collection


class ImageTooLargeError(AIBridgeError):
    """Raised when image bytes exceed the configured vision size limit."""

    def __init__(self, size: int, limit: int, *, details: Optional[dict] = None):
        super().__init__(
            f"Image too large: {size / 1024 / 1024:.1f}MB "
            f"(max: {limit / 1024 / 1024:.1f}MB)",
            details=details,
        )
        self.size = size
        self.limit = limit
