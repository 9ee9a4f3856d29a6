"""Data structures for phrase aggregation and filtering.

These are plain dataclasses (not Pydantic): they're read-only views over
stored analyses, built once per request and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Polarity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class CountMode(str, Enum):
    """How phrase text is counted into a frequency table.

    NGRAM counts each kept n-gram once per phrase it appears in.
    TOKEN counts every kept single-token occurrence.
    """

    NGRAM = "ngram"
    TOKEN = "token"


@dataclass(frozen=True)
class AnalysisRecord:
    """One stored analysis, as the aggregation code sees it."""

    id: int
    transcript_id: int | None = None
    summary: str | None = None
    positive_phrases: tuple[str, ...] = ()
    negative_phrases: tuple[str, ...] = ()
    created_at: datetime | None = None

    def phrases(self, polarity: Polarity) -> tuple[str, ...]:
        if polarity is Polarity.POSITIVE:
            return self.positive_phrases
        return self.negative_phrases


@dataclass(frozen=True)
class Selection:
    """The clicked cloud term: at most one is active per view."""

    term: str
    polarity: Polarity


@dataclass
class PhraseAggregate:
    """Ranked term sets for both clouds plus phrase totals."""

    positive_ranked: dict[str, int] = field(default_factory=dict)
    negative_ranked: dict[str, int] = field(default_factory=dict)
    total_positive_phrases: int = 0
    total_negative_phrases: int = 0

    def ranked(self, polarity: Polarity) -> dict[str, int]:
        if polarity is Polarity.POSITIVE:
            return self.positive_ranked
        return self.negative_ranked
