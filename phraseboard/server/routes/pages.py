"""Server-rendered HTML pages: upload form and interactive results."""

from __future__ import annotations

import logging
from pathlib import Path

import jinja2
from fastapi import APIRouter, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from phraseboard.phrases.cloud import CssHoverBackend, ScaleHover, layout_cloud
from phraseboard.phrases.models import Polarity
from phraseboard.phrases.selection import highlight_html
from phraseboard.phrases.view import ResultsView
from phraseboard.server.ingest import (
    AnalysisFailed,
    decode_transcript,
    ingest_transcript,
    llm_for_request,
)
from phraseboard.server.store import AnalysisStore

logger = logging.getLogger(__name__)

router = APIRouter()

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=jinja2.select_autoescape(["html"]),
    keep_trailing_newline=True,
)
_jinja_env.filters["highlight"] = highlight_html


def _get_db(request: Request) -> Session:
    """Get the database session from app state."""
    return request.app.state.db_factory()


def _render(name: str, **context: object) -> HTMLResponse:
    return HTMLResponse(_jinja_env.get_template(name).render(**context))


@router.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
    """Upload page."""
    return _render("index.html", active="upload")


@router.post("/upload")
async def upload_form(
    request: Request,
    file: UploadFile | None = File(default=None),
) -> RedirectResponse:
    """Form handler: store and analyse the file, then show the results."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    llm = llm_for_request(request)
    data = await file.read()
    public_url = request.app.state.blob_store.put(file.filename, data)

    db = _get_db(request)
    try:
        await ingest_transcript(
            AnalysisStore(db), llm, decode_transcript(data), file.filename, public_url
        )
    except AnalysisFailed as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    finally:
        db.close()

    return RedirectResponse("/results", status_code=303)


@router.get("/results", response_class=HTMLResponse)
def results_page(
    request: Request,
    term: str | None = Query(default=None),
    polarity: Polarity | None = Query(default=None),
    expanded: list[int] = Query(default=[]),
) -> HTMLResponse:
    """Word clouds for both polarities, plus the analyses matching a clicked term."""
    settings = request.app.state.settings
    db = _get_db(request)
    try:
        records = AnalysisStore(db).list_analyses()
    finally:
        db.close()

    view = ResultsView.build(
        records,
        term=term,
        polarity=polarity,
        expanded_ids=expanded,
        max_ngram_size=settings.max_ngram_size,
        top_n=settings.top_n,
    )

    hover = CssHoverBackend(
        ScaleHover(scale=settings.hover_scale, duration_ms=settings.hover_duration_ms)
    )
    clouds = [
        {
            "polarity": p,
            "title": p.value.capitalize(),
            "words": layout_cloud(
                view.summary.ranked(p),
                polarity=p,
                min_size=settings.cloud_min_font,
                max_size=settings.cloud_max_font,
            ),
        }
        for p in Polarity
    ]
    hover_css = "".join(hover.stylesheet(p) for p in Polarity)

    return _render(
        "results.html",
        active="results",
        view=view,
        clouds=clouds,
        hover_css=hover_css,
        word_style=hover.word_style,
        Polarity=Polarity,
    )
