"""Cloud-term selection: filtering records by clicked term and highlighting it.

The selection itself is transient view state.  Everything here is a pure
function of (records, selection) so callers can recompute on every request.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from markupsafe import Markup, escape

from phraseboard.phrases.models import AnalysisRecord, Polarity, Selection


class Highlight(NamedTuple):
    """A phrase split around the first match of a term.

    ``match`` is empty when the term doesn't occur; ``before`` then holds
    the whole phrase.
    """

    before: str
    match: str
    after: str


def _find(phrase: str, term: str) -> re.Match[str] | None:
    return re.search(re.escape(term), phrase, flags=re.IGNORECASE)


def phrase_contains(phrase: object, term: str) -> bool:
    """Case-insensitive substring test, the same one ``highlight`` marks.

    Non-strings never match.
    """
    return isinstance(phrase, str) and _find(phrase, term) is not None


def filter_by_term(
    records: Iterable[AnalysisRecord],
    term: str,
    polarity: Polarity,
) -> list[AnalysisRecord]:
    """Records with at least one *polarity* phrase containing *term*.

    Input order is preserved.  An empty term selects nothing.
    """
    if not term:
        return []
    return [
        r for r in records
        if any(phrase_contains(p, term) for p in r.phrases(polarity))
    ]


def matching_records(
    records: Iterable[AnalysisRecord],
    selection: Selection | None,
) -> list[AnalysisRecord]:
    """Records matching the active selection, or nothing when none is active."""
    if selection is None:
        return []
    return filter_by_term(records, selection.term, selection.polarity)


def toggle_selection(
    current: Selection | None,
    term: str,
    polarity: Polarity,
) -> Selection | None:
    """Next selection after a click on (*term*, *polarity*).

    Clicking the active pair clears it; any other pair replaces it.
    """
    clicked = Selection(term=term, polarity=polarity)
    if current == clicked:
        return None
    return clicked


def toggle_expanded(expanded: Mapping[int, bool], record_id: int) -> dict[int, bool]:
    """Flip one record between expanded and collapsed (absent = collapsed)."""
    return {**expanded, record_id: not expanded.get(record_id, False)}


def highlight(phrase: str, term: str) -> Highlight:
    """Split *phrase* around the first case-insensitive occurrence of *term*.

    Only the first occurrence is marked, even when the term repeats.
    """
    if not term:
        return Highlight(phrase, "", "")
    m = _find(phrase, term)
    if m is None:
        return Highlight(phrase, "", "")
    return Highlight(phrase[:m.start()], m.group(0), phrase[m.end():])


def highlight_html(phrase: str, term: str) -> Markup:
    """Escaped HTML for *phrase* with the first match wrapped in ``<mark>``."""
    before, match, after = highlight(phrase, term)
    if not match:
        return escape(phrase)
    return Markup('{}<mark class="mark-highlight">{}</mark>{}').format(before, match, after)
