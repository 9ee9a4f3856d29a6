"""Transcript ingestion endpoints: file upload and raw text analysis."""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from phraseboard.llm.client import LLMClient
from phraseboard.server.ingest import (
    AnalysisFailed,
    IngestResult,
    decode_transcript,
    ingest_transcript,
    llm_for_request,
)
from phraseboard.server.store import AnalysisStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class AnalyzeTextRequest(BaseModel):
    """Raw transcript text, optionally tied to an already-stored file."""

    text: str = ""
    file_name: str | None = None
    file_path: str | None = None


class AnalysisResultResponse(BaseModel):
    transcript_id: int | None
    analysis_id: int
    summary: str
    positive_phrases: list[str]
    negative_phrases: list[str]


class AnalyzeTextResponse(BaseModel):
    ok: bool
    result: AnalysisResultResponse


class UploadResponse(BaseModel):
    ok: bool
    public_url: str
    ai: AnalysisResultResponse


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_db(request: Request) -> Session:
    """Get the database session from app state."""
    return request.app.state.db_factory()


def _result_response(result: IngestResult) -> AnalysisResultResponse:
    return AnalysisResultResponse(
        transcript_id=result.transcript_id,
        analysis_id=result.analysis_id,
        summary=result.analysis.summary,
        positive_phrases=result.analysis.positive_phrases,
        negative_phrases=result.analysis.negative_phrases,
    )


async def _ingest(
    request: Request,
    llm: LLMClient,
    text: str,
    file_name: str | None,
    file_path: str | None,
) -> IngestResult:
    db = _get_db(request)
    try:
        return await ingest_transcript(AnalysisStore(db), llm, text, file_name, file_path)
    except AnalysisFailed as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    finally:
        db.close()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/analyze-text", response_model=AnalyzeTextResponse)
async def analyze_text(body: AnalyzeTextRequest, request: Request) -> AnalyzeTextResponse:
    """Analyse transcript text and store the result."""
    llm = llm_for_request(request)
    result = await _ingest(request, llm, body.text, body.file_name, body.file_path)
    return AnalyzeTextResponse(ok=True, result=_result_response(result))


@router.post("/upload-file", response_model=UploadResponse)
async def upload_file(
    request: Request,
    file: UploadFile | None = File(default=None),
) -> UploadResponse:
    """Store an uploaded transcript file, then analyse its text."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    llm = llm_for_request(request)
    data = await file.read()
    public_url = request.app.state.blob_store.put(file.filename, data)
    logger.info("Uploaded %s -> %s", file.filename, public_url)

    result = await _ingest(request, llm, decode_transcript(data), file.filename, public_url)
    return UploadResponse(ok=True, public_url=public_url, ai=_result_response(result))
