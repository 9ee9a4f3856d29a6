"""Tokenising, stop-word filtering and n-gram extraction for feedback phrases.

Pure text functions: no I/O, no models.  Frequency aggregation
(``phraseboard.phrases.frequency``) is built on top of these.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

#: Filler words dropped from single-token counts and from all-filler n-grams.
STOP_WORDS: frozenset[str] = frozenset({
    "the", "and", "a", "an", "to", "of", "in", "on", "for", "with",
    "is", "it", "was", "i", "we", "they", "that", "this", "are", "be",
    "but", "not", "have", "has", "my", "our",
})

#: Tokens (and joined n-grams) this short carry no meaning on their own.
MIN_MEANINGFUL_LENGTH = 3

DEFAULT_MAX_NGRAM_SIZE = 3

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def tokenize(phrase: object) -> list[str]:
    """Lowercase *phrase*, blank out punctuation, and split on whitespace.

    Anything that isn't a string tokenises to an empty list, so callers can
    feed stored data straight in without checking it first.
    """
    if not isinstance(phrase, str):
        return []
    cleaned = _NON_ALNUM_RE.sub(" ", phrase.lower())
    return [t for t in cleaned.split() if t]


def keep_token(token: str) -> bool:
    """Single-token filter: drop stop words and anything of 2 chars or fewer."""
    return len(token) >= MIN_MEANINGFUL_LENGTH and token not in STOP_WORDS


def keep_ngram(ngram: str) -> bool:
    """N-gram filter.

    Multi-word n-grams may carry one filler word ("wait time", "on hold")
    as long as something in them means something.  Dropped when:

    - the joined text is 2 characters or fewer
    - every token is a stop word
    - no token is longer than 2 characters
    """
    if len(ngram) < MIN_MEANINGFUL_LENGTH:
        return False
    parts = ngram.split(" ")
    if all(p in STOP_WORDS for p in parts):
        return False
    return any(len(p) >= MIN_MEANINGFUL_LENGTH for p in parts)


def extract_ngrams(tokens: Sequence[str], max_size: int = DEFAULT_MAX_NGRAM_SIZE) -> list[str]:
    """Every contiguous span of 1..max_size tokens, joined by single spaces.

    Ordered unigrams first (left to right), then bigrams, then trigrams.
    A sequence of n tokens yields ``sum(n - s + 1 for s in 1..min(K, n))``
    n-grams.
    """
    n = len(tokens)
    ngrams: list[str] = []
    for size in range(1, min(max_size, n) + 1):
        for i in range(n - size + 1):
            ngrams.append(" ".join(tokens[i:i + size]))
    return ngrams
