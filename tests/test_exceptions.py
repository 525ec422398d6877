"""
Unit tests for the custom exception hierarchy.

Validates exception creation, inheritance, and attribute storage.
"""

import pytest

from aibridge.exceptions import (
    AIBridgeError,
    BackendError,
    ClientUnavailableError,
    GeneratorUnavailableError,
    ImageTooLargeError,
    ProviderConfigurationError,
    ProviderNotFoundError,
    StructuredParseError,
    UnsupportedCapabilityError,
    VectorStoreError,
)


class TestAIBridgeError:
    """Tests for the base exception class."""

    def test_basic_creation(self):
        err = AIBridgeError("something broke")
        assert str(err) == "something broke"
        assert err.details == {}

    def test_with_details(self):
        err = AIBridgeError("oops", details={"code": 42})
        assert err.details["code"] == 42

    def test_is_exception(self):
        assert issubclass(AIBridgeError, Exception)

    @pytest.mark.parametrize("error_type", [
        BackendError,
        ClientUnavailableError,
        GeneratorUnavailableError,
        ImageTooLargeError,
        ProviderConfigurationError,
        ProviderNotFoundError,
        StructuredParseError,
        UnsupportedCapabilityError,
        VectorStoreError,
    ])
    def test_every_error_inherits_base(self, error_type):
        assert issubclass(error_type, AIBridgeError)


class TestSelectionErrors:

    def test_provider_not_found_message(self):
        err = ProviderNotFoundError("Nope")
        assert str(err) == "Provider Nope not found"
        assert err.provider == "Nope"

    def test_client_unavailable_stores_model(self):
        err = ClientUnavailableError("OpenAI", model="gpt-x")
        assert err.provider == "OpenAI"
        assert err.model == "gpt-x"
        assert "OpenAI" in str(err)

    def test_generator_unavailable_stores_provider(self):
        err = GeneratorUnavailableError("Anthropic")
        assert err.provider == "Anthropic"
        assert err.model is None
        assert "Embedding generator" in str(err)


class TestCapabilityError:

    def test_message_names_provider_and_capability(self):
        err = UnsupportedCapabilityError("Ollama", "function calling")
        assert str(err) == "Provider Ollama does not support function calling"
        assert err.capability == "function calling"

    def test_catchable_as_base(self):
        with pytest.raises(AIBridgeError):
            raise UnsupportedCapabilityError("Test", "vision")


class TestStructuredParseError:

    def test_stores_raw_text(self):
        err = StructuredParseError("bad", raw_text="not json")
        assert err.raw_text == "not json"


class TestBackendError:

    def test_stores_provider_and_status(self):
        err = BackendError("rate limited", provider="OpenAI", status_code=429)
        assert err.provider == "OpenAI"
        assert err.status_code == 429

    def test_chains_original(self):
        original = ConnectionError("refused")
        try:
            try:
                raise original
            except ConnectionError as e:
                raise BackendError("down", provider="Ollama") from e
        except BackendError as err:
            assert err.__cause__ is original


class TestConfigurationError:

    def test_stores_provider(self):
        err = ProviderConfigurationError("no key", provider="OpenAI")
        assert err.provider == "OpenAI"


class TestVectorStoreError:

    def test_stores_operation_and_collection(self):
        err = VectorStoreError("missing", operation="search", collection="notes")
        assert err.operation == "search"
        assert err.collection == "notes"


class TestImageTooLargeError:

    def test_message_in_megabytes(self):
        err = ImageTooLargeError(6 * 1024 * 1024, 5 * 1024 * 1024)
        assert "6.0MB" in str(err)
        assert "5.0MB" in str(err)
        assert err.size == 6 * 1024 * 1024
        assert err.limit == 5 * 1024 * 1024
