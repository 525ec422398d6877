"""
Tests for the configuration schema and YAML loader.
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from aibridge.config import (
    AIServiceOptions,
    ProviderConfiguration,
    VisionServiceOptions,
    load_options,
    options_from_dict,
    parse_size,
)

SAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "config" / "ai_bridge.yaml"


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "ai_bridge.yaml"
    path.write_text(textwrap.dedent(body))
    return path


class TestParseSize:

    @pytest.mark.parametrize("value,expected", [
        ("5MB", 5 * 1024 * 1024),
        ("512KB", 512 * 1024),
        ("1GB", 1024 ** 3),
        ("1024", 1024),
        ("2.5mb", int(2.5 * 1024 * 1024)),
    ])
    def test_valid_sizes(self, value, expected):
        assert parse_size(value) == expected

    @pytest.mark.parametrize("value", ["", "MB", "five", "5TB"])
    def test_invalid_sizes(self, value):
        with pytest.raises(ValueError):
            parse_size(value)


class TestDefaults:

    def test_service_defaults(self):
        options = AIServiceOptions()
        assert options.default_provider == "OpenAI"
        assert options.providers == {}
        assert options.services.chat.default_max_tokens == 4000
        assert options.services.chat.default_temperature == 0.7
        assert options.services.chat.enable_streaming is True
        assert options.services.chat.mark_all_chunks_complete is False
        assert options.services.embeddings.default_dimensions == 384
        assert options.services.embeddings.batch_size == 100
        assert options.services.vision.max_image_size == "5MB"
        assert options.services.vision.supported_formats == ["jpg", "png", "webp"]

    def test_max_image_bytes(self):
        assert VisionServiceOptions(max_image_size="1KB").max_image_bytes == 1024

    def test_invalid_max_image_size_rejected(self):
        with pytest.raises(ValueError):
            VisionServiceOptions(max_image_size="huge")


class TestProviderConfiguration:

    def test_literal_key_wins(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "from-env")
        config = ProviderConfiguration(api_key="literal", api_key_env="MY_KEY")
        assert config.resolve_api_key() == "literal"

    def test_key_from_env(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "from-env")
        assert ProviderConfiguration(api_key_env="MY_KEY").resolve_api_key() == "from-env"

    def test_missing_env_key_is_none(self, monkeypatch):
        monkeypatch.delenv("MY_KEY", raising=False)
        assert ProviderConfiguration(api_key_env="MY_KEY").resolve_api_key() is None

    def test_additional_settings_are_strings(self):
        config = ProviderConfiguration(additional_settings={"timeout": "30"})
        assert config.additional_settings["timeout"] == "30"

    def test_unquoted_scalars_become_strings(self):
        options = options_from_dict({
            "providers": {
                "Ollama": {"additional_settings": {"timeout": 120, "ratio": 0.5, "stream": True}},
            },
        })
        settings = options.providers["Ollama"].additional_settings
        assert settings == {"timeout": "120", "ratio": "0.5", "stream": "true"}

    def test_unquoted_yaml_settings_load(self, tmp_path):
        path = _write(tmp_path, """
            providers:
              Ollama:
                additional_settings:
                  timeout: 120
                  keep_alive: 5m
                  verbose: false
        """)
        settings = load_options(path).providers["Ollama"].additional_settings
        assert settings["timeout"] == "120"
        assert settings["keep_alive"] == "5m"
        assert settings["verbose"] == "false"

    def test_nested_settings_still_rejected(self):
        with pytest.raises(ValueError, match="Invalid AI Bridge config"):
            options_from_dict({"providers": {"X": {"additional_settings": {"a": {"b": 1}}}}})


class TestOptionsFromDict:

    def test_bare_tree(self):
        options = options_from_dict({"default_provider": "Ollama"})
        assert options.default_provider == "Ollama"

    def test_section_tree(self):
        options = options_from_dict({"ai_bridge": {"default_provider": "Ollama"}})
        assert options.default_provider == "Ollama"

    def test_validation_error_becomes_value_error(self):
        with pytest.raises(ValueError, match="Invalid AI Bridge config"):
            options_from_dict({"services": {"chat": {"default_max_tokens": 0}}})


class TestLoadOptions:

    def test_loads_yaml(self, tmp_path):
        path = _write(tmp_path, """
            ai_bridge:
              default_provider: Ollama
              providers:
                Ollama:
                  endpoint: http://gpu:11434
                  models:
                    chat: llama3.1:8b
              services:
                chat:
                  default_temperature: 0.2
        """)
        options = load_options(path)

        assert options.default_provider == "Ollama"
        assert options.providers["Ollama"].endpoint == "http://gpu:11434"
        assert options.providers["Ollama"].models.chat == "llama3.1:8b"
        assert options.providers["Ollama"].models.embeddings is None
        assert options.services.chat.default_temperature == 0.2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_options(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        with pytest.raises(ValueError, match="empty"):
            load_options(_write(tmp_path, ""))

    def test_non_mapping_root(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            load_options(_write(tmp_path, "- a\n- b\n"))

    def test_sample_config_is_valid(self):
        options = load_options(SAMPLE_CONFIG)
        assert set(options.providers) == {"OpenAI", "Ollama", "Anthropic"}
        assert options.providers["OpenAI"].api_key_env == "OPENAI_API_KEY"
