"""Phrase aggregation, word clouds and term filtering."""

from phraseboard.phrases.cloud import CloudWord, CssHoverBackend, ScaleHover, layout_cloud
from phraseboard.phrases.frequency import aggregate, count_phrases, rank_top_n
from phraseboard.phrases.models import (
    AnalysisRecord,
    CountMode,
    PhraseAggregate,
    Polarity,
    Selection,
)
from phraseboard.phrases.selection import filter_by_term, highlight, toggle_selection
from phraseboard.phrases.tokens import extract_ngrams, tokenize
from phraseboard.phrases.view import ResultsView

__all__ = [
    "AnalysisRecord",
    "CloudWord",
    "CountMode",
    "CssHoverBackend",
    "PhraseAggregate",
    "Polarity",
    "ResultsView",
    "ScaleHover",
    "Selection",
    "aggregate",
    "count_phrases",
    "extract_ngrams",
    "filter_by_term",
    "highlight",
    "layout_cloud",
    "rank_top_n",
    "tokenize",
    "toggle_selection",
]
