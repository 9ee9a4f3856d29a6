"""Transcript ingestion: store the file, analyse the text, persist the result.

Shared by the upload and analyze-text endpoints, the HTML upload form and
the ``phraseboard ingest`` command.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from phraseboard.llm.client import LLMClient
from phraseboard.llm.structured import TranscriptAnalysis
from phraseboard.server.store import AnalysisStore

logger = logging.getLogger(__name__)


class AnalysisFailed(RuntimeError):
    """The LLM call behind an ingestion failed."""


@dataclass
class IngestResult:
    transcript_id: int | None
    analysis_id: int
    analysis: TranscriptAnalysis


def decode_transcript(data: bytes) -> str:
    """Decode uploaded bytes as UTF-8 (BOM tolerated, bad bytes replaced)."""
    return data.decode("utf-8-sig", errors="replace")


async def ingest_transcript(
    store: AnalysisStore,
    llm: LLMClient,
    text: str,
    file_name: str | None = None,
    file_path: str | None = None,
) -> IngestResult:
    """Analyse *text*, then store the transcript row plus its analysis.

    Nothing is written until the LLM call succeeds.  A transcript row is
    only written when there's a name or path to record; if that write
    fails the analysis is still stored, unlinked.
    """
    try:
        analysis = await llm.summarize(text)
    except Exception as exc:
        logger.exception("Transcript analysis failed (provider=%s)", llm.provider)
        raise AnalysisFailed(f"Transcript analysis failed: {exc}") from exc

    transcript_id: int | None = None
    if file_name or file_path:
        try:
            transcript_id = store.insert_transcript(file_name, file_path)
        except SQLAlchemyError:
            store.db.rollback()
            logger.exception("Failed to insert transcript %s", file_name or file_path)

    analysis_id = store.insert_analysis(transcript_id, analysis)
    return IngestResult(transcript_id=transcript_id, analysis_id=analysis_id, analysis=analysis)


def llm_for_request(request: Request) -> LLMClient:
    """The app's LLM client, created on first use.

    Raises 503 when the configured provider can't be used (missing key,
    unknown provider) so the rest of the app keeps working without one.
    """
    client: LLMClient | None = getattr(request.app.state, "llm", None)
    if client is None:
        try:
            client = LLMClient(request.app.state.settings)
        except ValueError as exc:
            logger.warning("LLM unavailable: %s", exc)
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        request.app.state.llm = client
    return client
