"""Tests for the prompt loader (phraseboard.llm.prompts)."""

from __future__ import annotations

import re

import pytest

from phraseboard.llm.prompts import _PROMPTS_DIR, PromptPair, get_prompt

PROMPT_NAMES = ["transcript-analysis", "chat"]

EXPECTED_VARIABLES: dict[str, set[str]] = {
    "transcript-analysis": {"transcript"},
    "chat": {"count", "knowledge"},
}

_VAR_RE = re.compile(r"\{(\w+)\}")


class TestPromptLoading:
    """Every prompt file loads and contains expected sections."""

    @pytest.mark.parametrize("name", PROMPT_NAMES)
    def test_file_exists(self, name: str) -> None:
        path = _PROMPTS_DIR / f"{name}.md"
        assert path.exists(), f"Missing prompt file: {path}"

    @pytest.mark.parametrize("name", PROMPT_NAMES)
    def test_loads_successfully(self, name: str) -> None:
        pair = get_prompt(name)
        assert isinstance(pair, PromptPair)
        assert pair.system
        assert pair.user

    @pytest.mark.parametrize("name", PROMPT_NAMES)
    def test_template_variables(self, name: str) -> None:
        pair = get_prompt(name)
        assert set(_VAR_RE.findall(pair.user)) == EXPECTED_VARIABLES[name]
        assert not _VAR_RE.findall(pair.system)

    def test_cached(self) -> None:
        assert get_prompt("chat") is get_prompt("chat")

    def test_missing_prompt(self) -> None:
        with pytest.raises(FileNotFoundError):
            get_prompt("does-not-exist")

    def test_transcript_substitution(self) -> None:
        user = get_prompt("transcript-analysis").user.format(transcript="Customer: hi")
        assert "<transcript>\nCustomer: hi\n</transcript>" in user
