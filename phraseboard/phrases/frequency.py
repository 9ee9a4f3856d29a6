"""Frequency tables and top-N ranking for the positive/negative clouds."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping

from phraseboard.phrases.models import AnalysisRecord, CountMode, PhraseAggregate, Polarity
from phraseboard.phrases.tokens import (
    DEFAULT_MAX_NGRAM_SIZE,
    extract_ngrams,
    keep_ngram,
    keep_token,
    tokenize,
)

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 60


def phrase_terms(
    phrase: object,
    max_ngram_size: int = DEFAULT_MAX_NGRAM_SIZE,
    mode: CountMode = CountMode.NGRAM,
) -> list[str]:
    """The terms one phrase contributes to a frequency table.

    NGRAM mode returns each kept n-gram once (first-seen order), so a
    phrase that says "long wait, long wait" still counts "long wait" once.
    TOKEN mode returns every kept token, repeats included.
    """
    tokens = tokenize(phrase)
    if not tokens:
        return []
    if mode is CountMode.TOKEN:
        return [t for t in tokens if keep_token(t)]
    kept = (ng for ng in extract_ngrams(tokens, max_ngram_size) if keep_ngram(ng))
    return list(dict.fromkeys(kept))


def count_phrases(
    phrases: Iterable[object],
    max_ngram_size: int = DEFAULT_MAX_NGRAM_SIZE,
    mode: CountMode = CountMode.NGRAM,
) -> Counter[str]:
    """Build a frequency table over *phrases*.

    Blank and non-string phrases are skipped.  Keys keep discovery order,
    which the ranker relies on to break ties.
    """
    counts: Counter[str] = Counter()
    for phrase in phrases:
        if not isinstance(phrase, str) or not phrase.strip():
            continue
        counts.update(phrase_terms(phrase, max_ngram_size, mode))
    return counts


def rank_top_n(table: Mapping[str, int], top_n: int = DEFAULT_TOP_N) -> dict[str, int]:
    """The *top_n* highest counts, descending, ties in discovery order."""
    if top_n <= 0:
        return {}
    # sorted() is stable, so equal counts keep the table's insertion order
    ranked = sorted(table.items(), key=lambda item: item[1], reverse=True)
    return dict(ranked[:top_n])


def aggregate(
    records: Iterable[AnalysisRecord],
    max_ngram_size: int = DEFAULT_MAX_NGRAM_SIZE,
    top_n: int = DEFAULT_TOP_N,
    mode: CountMode = CountMode.NGRAM,
) -> PhraseAggregate:
    """Aggregate every record's phrases into ranked positive/negative term sets.

    Totals count every stored phrase entry, including blank ones that
    contribute no terms.
    """
    tables: dict[Polarity, Counter[str]] = {p: Counter() for p in Polarity}
    totals: dict[Polarity, int] = {p: 0 for p in Polarity}

    n_records = 0
    for record in records:
        n_records += 1
        for polarity in Polarity:
            phrases = record.phrases(polarity)
            totals[polarity] += len(phrases)
            tables[polarity].update(count_phrases(phrases, max_ngram_size, mode))

    logger.debug(
        "Aggregated %d records: %d positive terms, %d negative terms",
        n_records,
        len(tables[Polarity.POSITIVE]),
        len(tables[Polarity.NEGATIVE]),
    )

    return PhraseAggregate(
        positive_ranked=rank_top_n(tables[Polarity.POSITIVE], top_n),
        negative_ranked=rank_top_n(tables[Polarity.NEGATIVE], top_n),
        total_positive_phrases=totals[Polarity.POSITIVE],
        total_negative_phrases=totals[Polarity.NEGATIVE],
    )
