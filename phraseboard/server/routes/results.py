"""Results API: aggregated cloud terms and term-filtered analyses."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from phraseboard.phrases.frequency import aggregate
from phraseboard.phrases.models import AnalysisRecord, Polarity
from phraseboard.phrases.selection import filter_by_term, highlight
from phraseboard.server.store import AnalysisStore

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ResultsResponse(BaseModel):
    """Ranked cloud terms for both polarities (ordered by count, descending)."""

    positive_ranked: dict[str, int]
    negative_ranked: dict[str, int]
    total_positive_phrases: int
    total_negative_phrases: int
    total_analyses: int


class HighlightedPhraseResponse(BaseModel):
    """A phrase split around the first match of the selected term."""

    text: str
    before: str
    match: str
    after: str


class MatchedAnalysisResponse(BaseModel):
    id: int
    transcript_id: int | None
    summary: str | None
    created_at: str | None
    positive_phrases: list[HighlightedPhraseResponse]
    negative_phrases: list[HighlightedPhraseResponse]


class MatchesResponse(BaseModel):
    term: str
    polarity: Polarity
    match_count: int
    analyses: list[MatchedAnalysisResponse]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_db(request: Request) -> Session:
    """Get the database session from app state."""
    return request.app.state.db_factory()


def _load_records(request: Request) -> list[AnalysisRecord]:
    db = _get_db(request)
    try:
        return AnalysisStore(db).list_analyses()
    finally:
        db.close()


def _highlighted(phrases: tuple[str, ...], term: str) -> list[HighlightedPhraseResponse]:
    out: list[HighlightedPhraseResponse] = []
    for p in phrases:
        before, match, after = highlight(p, term)
        out.append(HighlightedPhraseResponse(text=p, before=before, match=match, after=after))
    return out


def _matched_response(record: AnalysisRecord, term: str) -> MatchedAnalysisResponse:
    return MatchedAnalysisResponse(
        id=record.id,
        transcript_id=record.transcript_id,
        summary=record.summary,
        created_at=record.created_at.isoformat() if record.created_at else None,
        positive_phrases=_highlighted(record.positive_phrases, term),
        negative_phrases=_highlighted(record.negative_phrases, term),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/results", response_model=ResultsResponse)
def get_results(
    request: Request,
    max_ngram_size: int | None = Query(default=None, ge=1, le=5),
    top_n: int | None = Query(default=None, ge=1, le=500),
) -> ResultsResponse:
    """Aggregate every stored analysis into ranked positive/negative terms."""
    settings = request.app.state.settings
    records = _load_records(request)
    summary = aggregate(
        records,
        max_ngram_size=max_ngram_size or settings.max_ngram_size,
        top_n=top_n or settings.top_n,
    )
    return ResultsResponse(
        positive_ranked=summary.positive_ranked,
        negative_ranked=summary.negative_ranked,
        total_positive_phrases=summary.total_positive_phrases,
        total_negative_phrases=summary.total_negative_phrases,
        total_analyses=len(records),
    )


@router.get("/results/matches", response_model=MatchesResponse)
def get_matches(
    request: Request,
    term: str = Query(min_length=1),
    polarity: Polarity = Query(),
) -> MatchesResponse:
    """Analyses whose *polarity* phrases contain *term* (case-insensitive)."""
    matches = filter_by_term(_load_records(request), term, polarity)
    return MatchesResponse(
        term=term,
        polarity=polarity,
        match_count=len(matches),
        analyses=[_matched_response(r, term) for r in matches],
    )
