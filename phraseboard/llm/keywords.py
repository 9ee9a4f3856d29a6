"""Offline keyword provider: no network, no API key.

A deliberately naive stand-in for a hosted model, used for demos, local
development and tests.  Summaries are the first few hundred characters of
the transcript; feedback phrases are fixed keywords found in the text.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from phraseboard.llm.structured import TranscriptAnalysis
from phraseboard.phrases.models import AnalysisRecord, Polarity
from phraseboard.phrases.selection import filter_by_term
from phraseboard.phrases.tokens import keep_token, tokenize

POSITIVE_KEYWORDS = ("good", "great", "helpful", "excellent", "fast", "friendly")
NEGATIVE_KEYWORDS = ("bad", "slow", "unhelpful", "rude", "long", "wait")

FALLBACK_POSITIVE = "service was adequate"
FALLBACK_NEGATIVE = "no glaring issues found"
EMPTY_SUMMARY = "No text provided"


def keyword_analysis(text: str, summary_max_chars: int = 280) -> TranscriptAnalysis:
    """Analyse *text* by substring-matching the fixed keyword lists.

    Matching is substring-based, so "unhelpful" also counts as "helpful".
    """
    trimmed = text.strip()
    lower = text.lower()
    positives = [k for k in POSITIVE_KEYWORDS if k in lower]
    negatives = [k for k in NEGATIVE_KEYWORDS if k in lower]
    if trimmed:
        positives = positives or [FALLBACK_POSITIVE]
        negatives = negatives or [FALLBACK_NEGATIVE]
    return TranscriptAnalysis(
        summary=trimmed[:summary_max_chars] if trimmed else EMPTY_SUMMARY,
        positive_phrases=positives,
        negative_phrases=negatives,
    )


def keyword_reply(message: str, records: Sequence[AnalysisRecord]) -> Iterator[str]:
    """Answer a chat message by counting analyses that mention its words.

    Yields one line per meaningful word so the reply streams naturally.
    """
    if not records:
        yield "No analyses have been stored yet. Upload a transcript first.\n"
        return

    terms = list(dict.fromkeys(t for t in tokenize(message) if keep_token(t)))
    if not terms:
        yield 'Ask about a word or phrase from the feedback, e.g. "wait" or "friendly".\n'
        return

    for term in terms:
        pos = filter_by_term(records, term, Polarity.POSITIVE)
        neg = filter_by_term(records, term, Polarity.NEGATIVE)
        if not pos and not neg:
            yield f'"{term}" does not appear in any feedback phrase.\n'
            continue
        ids = ", ".join(f"#{r.id}" for r in [*pos, *(r for r in neg if r not in pos)])
        yield (
            f'"{term}" appears in {len(pos)} positive and {len(neg)} negative '
            f"analyses ({ids}).\n"
        )
