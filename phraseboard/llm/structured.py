"""Pydantic models for structured LLM output parsing.

Everything an LLM hands back passes through here before it reaches the
store.  Field-name variants seen from different prompts and older service
versions (``positive_feedback``, ``positiveFeedback``) are folded into one
canonical shape, and missing or malformed fields get defaults.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _clean_phrases(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [p.strip() for p in value if isinstance(p, str) and p.strip()]


class TranscriptAnalysis(BaseModel):
    """LLM output for one transcript: summary plus feedback phrases."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(
        default="",
        description="A short neutral summary of the conversation (2-4 sentences)",
    )
    positive_phrases: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "positive_phrases", "positive_feedback", "positiveFeedback", "positivePhrases",
        ),
        description=(
            "Short phrases (1-4 words) capturing what the customer liked, "
            "e.g. 'fast response', 'friendly agent'"
        ),
    )
    negative_phrases: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "negative_phrases", "negative_feedback", "negativeFeedback", "negativePhrases",
        ),
        description=(
            "Short phrases (1-4 words) capturing complaints or friction, "
            "e.g. 'long wait', 'unexpected shutdown'"
        ),
    )

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_default(cls, v: object) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("positive_phrases", "negative_phrases", mode="before")
    @classmethod
    def _phrases_default(cls, v: object) -> list[str]:
        return _clean_phrases(v)


class ChatTurn(BaseModel):
    """One earlier message in a chat session."""

    role: Literal["user", "assistant"]
    content: str
