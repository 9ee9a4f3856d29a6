"""Tests for structured LLM output normalisation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from phraseboard.llm.structured import ChatTurn, TranscriptAnalysis


class TestTranscriptAnalysis:
    def test_canonical_fields(self) -> None:
        result = TranscriptAnalysis.model_validate({
            "summary": "Billing call.",
            "positive_phrases": ["friendly agent"],
            "negative_phrases": ["long wait"],
        })
        assert result.summary == "Billing call."
        assert result.positive_phrases == ["friendly agent"]
        assert result.negative_phrases == ["long wait"]

    @pytest.mark.parametrize(
        "pos_key,neg_key",
        [
            ("positive_feedback", "negative_feedback"),
            ("positiveFeedback", "negativeFeedback"),
            ("positivePhrases", "negativePhrases"),
        ],
    )
    def test_legacy_field_names(self, pos_key: str, neg_key: str) -> None:
        result = TranscriptAnalysis.model_validate({
            "summary": "s",
            pos_key: ["fast"],
            neg_key: ["rude"],
        })
        assert result.positive_phrases == ["fast"]
        assert result.negative_phrases == ["rude"]

    def test_missing_fields_default(self) -> None:
        result = TranscriptAnalysis.model_validate({})
        assert result.summary == ""
        assert result.positive_phrases == []
        assert result.negative_phrases == []

    def test_null_fields_default(self) -> None:
        result = TranscriptAnalysis.model_validate({
            "summary": None, "positive_phrases": None, "negative_phrases": None,
        })
        assert result.summary == ""
        assert result.positive_phrases == []

    def test_bare_string_becomes_list(self) -> None:
        result = TranscriptAnalysis.model_validate({"positive_phrases": "helpful"})
        assert result.positive_phrases == ["helpful"]

    def test_non_strings_and_blanks_dropped(self) -> None:
        result = TranscriptAnalysis.model_validate({
            "negative_phrases": ["  slow  ", "", 4, None, "   ", "rude"],
        })
        assert result.negative_phrases == ["slow", "rude"]

    def test_summary_stripped(self) -> None:
        assert TranscriptAnalysis(summary="  hi  ").summary == "hi"

    def test_dump_uses_canonical_names(self) -> None:
        dumped = TranscriptAnalysis.model_validate({"positive_feedback": ["x1"]}).model_dump()
        assert set(dumped) == {"summary", "positive_phrases", "negative_phrases"}

    def test_schema_names_canonical_fields(self) -> None:
        props = TranscriptAnalysis.model_json_schema()["properties"]
        assert "summary" in props


class TestChatTurn:
    def test_roles(self) -> None:
        assert ChatTurn(role="user", content="hi").role == "user"
        assert ChatTurn(role="assistant", content="hello").role == "assistant"

    def test_rejects_unknown_role(self) -> None:
        with pytest.raises(ValidationError):
            ChatTurn(role="system", content="x")  # type: ignore[arg-type]
