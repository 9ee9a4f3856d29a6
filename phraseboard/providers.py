"""LLM providers Phraseboard can talk to.

Each entry names the provider's aliases, its default model and, for the
cloud providers, which setting holds the API key.  ``LLMClient`` checks
the configured provider against this table before making any calls.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderSpec:
    name: str
    label: str
    aliases: tuple[str, ...] = ()
    default_model: str = ""
    key_setting: str = ""  # PhraseboardSettings attribute; empty when no key is needed
    key_url: str = ""

    @property
    def key_env_var(self) -> str:
        return f"PHRASEBOARD_{self.key_setting.upper()}"

    def missing_key_message(self) -> str:
        return (
            f"{self.label} API key not set. "
            f"Set {self.key_env_var} in your .env file or environment. "
            f"Get a key from {self.key_url}"
        )


PROVIDERS: dict[str, ProviderSpec] = {
    "anthropic": ProviderSpec(
        name="anthropic",
        label="Claude",
        aliases=("claude",),
        default_model="claude-sonnet-4-20250514",
        key_setting="anthropic_api_key",
        key_url="console.anthropic.com",
    ),
    "openai": ProviderSpec(
        name="openai",
        label="ChatGPT",
        aliases=("chatgpt", "gpt"),
        default_model="gpt-4o",
        key_setting="openai_api_key",
        key_url="platform.openai.com",
    ),
    "local": ProviderSpec(
        name="local",
        label="Local (Ollama)",
        aliases=("ollama",),
        default_model="llama3.2:3b",
    ),
    "keywords": ProviderSpec(
        name="keywords",
        label="Offline keyword matcher",
        aliases=("offline", "mock"),
    ),
}


def resolve_provider(name: str) -> str:
    """Resolve a provider name or alias to its canonical name.

    Raises:
        ValueError: If the provider is not recognised.
    """
    name = name.lower()
    if name in PROVIDERS:
        return name
    aliases = get_provider_aliases()
    if name in aliases:
        return aliases[name]
    raise ValueError(
        f"Unknown LLM provider: {name}. "
        f"Valid providers: {', '.join([*PROVIDERS, *aliases])}"
    )


def get_provider_aliases() -> dict[str, str]:
    """Return a dict mapping all aliases to canonical provider names."""
    return {alias: spec.name for spec in PROVIDERS.values() for alias in spec.aliases}
