"""Application settings loaded from environment variables or .env."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_files() -> list[Path]:
    """Find .env files to load, searching upward from CWD and in the package dir.

    Checks (in priority order, last wins in pydantic-settings):
    1. The package directory's parent (source checkout / editable install)
    2. The current working directory, then its parents up to the first hit
    """
    candidates: list[Path] = []

    pkg_env = Path(__file__).resolve().parent.parent / ".env"
    if pkg_env.is_file():
        candidates.append(pkg_env)

    cwd = Path.cwd().resolve()
    for parent in [cwd, *cwd.parents]:
        env_path = parent / ".env"
        if env_path.is_file() and env_path not in candidates:
            candidates.append(env_path)
            break  # stop at first match going upward

    return candidates


class PhraseboardSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PHRASEBOARD_",
        env_file=_find_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM
    llm_provider: str = "anthropic"  # "anthropic", "openai", "local", or "keywords"
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    llm_model: str = ""  # empty: the provider's default model
    llm_max_tokens: int = 4096
    llm_temperature: float = 0.1

    # Local LLM (Ollama)
    local_url: str = "http://localhost:11434/v1"
    local_model: str = "llama3.2:3b"

    # Storage: SQLite DB, uploaded transcripts and the log file
    data_dir: Path = Path("phraseboard-data")

    # Aggregation
    max_ngram_size: int = 3
    top_n: int = 60

    # Word clouds
    cloud_min_font: int = 14
    cloud_max_font: int = 64
    hover_scale: float = 1.4
    hover_duration_ms: int = 200

    # Offline keyword provider
    summary_max_chars: int = 280

    # Chat
    chat_context_limit: int = 20


def load_settings(**overrides: object) -> PhraseboardSettings:
    """Load settings with optional CLI overrides.

    Normalises LLM provider aliases (claude → anthropic, chatgpt/gpt → openai,
    ollama → local, offline/mock → keywords).  ``None`` overrides are dropped
    so unset CLI options fall through to the environment.
    """
    # Import here to avoid circular import at module load time
    from phraseboard.providers import get_provider_aliases

    overrides = {k: v for k, v in overrides.items() if v is not None}

    if "llm_provider" in overrides and isinstance(overrides["llm_provider"], str):
        provider = overrides["llm_provider"].lower()
        aliases = get_provider_aliases()
        overrides["llm_provider"] = aliases.get(provider, provider)

    return PhraseboardSettings(**overrides)  # type: ignore[arg-type]
