"""Tests for settings loading and provider resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from phraseboard.config import PhraseboardSettings, load_settings
from phraseboard.providers import PROVIDERS, get_provider_aliases, resolve_provider


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PHRASEBOARD_TOP_N", raising=False)
        settings = PhraseboardSettings(_env_file=None)  # type: ignore[call-arg]
        assert settings.max_ngram_size == 3
        assert settings.top_n == 60
        assert settings.cloud_min_font == 14
        assert settings.cloud_max_font == 64
        assert settings.hover_scale == 1.4
        assert settings.hover_duration_ms == 200

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHRASEBOARD_TOP_N", "25")
        monkeypatch.setenv("PHRASEBOARD_DATA_DIR", "/srv/phrases")
        settings = PhraseboardSettings()
        assert settings.top_n == 25
        assert settings.data_dir == Path("/srv/phrases")


class TestLoadSettings:
    @pytest.mark.parametrize(
        "alias,canonical",
        [
            ("claude", "anthropic"),
            ("chatgpt", "openai"),
            ("gpt", "openai"),
            ("ollama", "local"),
            ("offline", "keywords"),
            ("Mock", "keywords"),
            ("anthropic", "anthropic"),
        ],
    )
    def test_provider_aliases(self, alias: str, canonical: str) -> None:
        assert load_settings(llm_provider=alias).llm_provider == canonical

    def test_none_overrides_fall_through(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHRASEBOARD_TOP_N", "12")
        settings = load_settings(top_n=None, data_dir=None)
        assert settings.top_n == 12

    def test_explicit_override_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHRASEBOARD_TOP_N", "12")
        assert load_settings(top_n=5).top_n == 5


class TestProviders:
    def test_resolve_canonical_and_alias(self) -> None:
        assert resolve_provider("claude") == "anthropic"
        assert resolve_provider("LOCAL") == "local"

    def test_resolve_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            resolve_provider("gemini")

    def test_aliases_map_to_registered_providers(self) -> None:
        for alias, name in get_provider_aliases().items():
            assert name in PROVIDERS
            assert alias not in PROVIDERS

    def test_only_cloud_providers_need_a_key(self) -> None:
        assert PROVIDERS["anthropic"].key_env_var == "PHRASEBOARD_ANTHROPIC_API_KEY"
        assert PROVIDERS["openai"].key_env_var == "PHRASEBOARD_OPENAI_API_KEY"
        assert PROVIDERS["local"].key_setting == ""
        assert PROVIDERS["keywords"].key_setting == ""

    def test_key_settings_exist(self) -> None:
        fields = PhraseboardSettings.model_fields
        for spec in PROVIDERS.values():
            assert not spec.key_setting or spec.key_setting in fields

    def test_unknown_provider_passes_through_load_settings(self) -> None:
        # rejected later, when an LLMClient is built from these settings
        assert load_settings(llm_provider="Gemini").llm_provider == "gemini"
