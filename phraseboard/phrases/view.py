"""Per-view interaction state for the results page.

A results page shows two clouds and, once a term is clicked, the analyses
containing it.  The clicked term and the expanded cards are the only mutable
state, and they belong to one view.  The web page round-trips them through
the URL query string, so each request rebuilds its own :class:`ResultsView`
and each link points at the state the click leads to.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from urllib.parse import urlencode

from phraseboard.phrases.frequency import DEFAULT_TOP_N, aggregate
from phraseboard.phrases.models import AnalysisRecord, PhraseAggregate, Polarity, Selection
from phraseboard.phrases.selection import matching_records, toggle_expanded, toggle_selection
from phraseboard.phrases.tokens import DEFAULT_MAX_NGRAM_SIZE


@dataclass
class ResultsView:
    records: list[AnalysisRecord]
    summary: PhraseAggregate
    selection: Selection | None = None
    expanded: dict[int, bool] = field(default_factory=dict)
    base_path: str = "/results"

    @classmethod
    def build(
        cls,
        records: Iterable[AnalysisRecord],
        *,
        term: str | None = None,
        polarity: Polarity | None = None,
        expanded_ids: Sequence[int] = (),
        max_ngram_size: int = DEFAULT_MAX_NGRAM_SIZE,
        top_n: int = DEFAULT_TOP_N,
        base_path: str = "/results",
    ) -> ResultsView:
        """Rebuild a view from request parameters.

        A term without a polarity (or vice versa) means no selection.
        """
        rows = list(records)
        selection = Selection(term, polarity) if term and polarity is not None else None
        return cls(
            records=rows,
            summary=aggregate(rows, max_ngram_size, top_n),
            selection=selection,
            expanded={rid: True for rid in expanded_ids},
            base_path=base_path,
        )

    # -- state transitions --------------------------------------------------

    def click(self, term: str, polarity: Polarity) -> None:
        self.selection = toggle_selection(self.selection, term, polarity)

    def toggle_expand(self, record_id: int) -> None:
        self.expanded = toggle_expanded(self.expanded, record_id)

    # -- derived ------------------------------------------------------------

    @property
    def matches(self) -> list[AnalysisRecord]:
        return matching_records(self.records, self.selection)

    def is_expanded(self, record_id: int) -> bool:
        return self.expanded.get(record_id, False)

    def is_selected(self, term: str, polarity: Polarity) -> bool:
        return self.selection == Selection(term, polarity)

    # -- links --------------------------------------------------------------

    def _href(self, selection: Selection | None, expanded: dict[int, bool]) -> str:
        params: dict[str, object] = {}
        if selection is not None:
            params["term"] = selection.term
            params["polarity"] = selection.polarity.value
        ids = sorted(rid for rid, is_open in expanded.items() if is_open)
        if ids:
            params["expanded"] = ids
        query = urlencode(params, doseq=True)
        return f"{self.base_path}?{query}" if query else self.base_path

    def click_href(self, term: str, polarity: Polarity) -> str:
        """Link to the view after clicking (*term*, *polarity*)."""
        return self._href(toggle_selection(self.selection, term, polarity), self.expanded)

    def expand_href(self, record_id: int) -> str:
        """Link to the view with *record_id* expanded or collapsed."""
        return self._href(self.selection, toggle_expanded(self.expanded, record_id))
