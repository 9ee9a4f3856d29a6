"""Knowledge-base chat: streams a reply about the stored analyses.

The server keeps no chat state.  Each request carries its own session id
and history, and gets back the session id in ``X-Session-Id``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from phraseboard.llm.client import LLMClient
from phraseboard.llm.structured import ChatTurn
from phraseboard.phrases.models import AnalysisRecord
from phraseboard.server.ingest import llm_for_request
from phraseboard.server.store import AnalysisStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_FAILURE_TEXT = "\n[Failed to get a response from the AI.]\n"


class ChatRequest(BaseModel):
    message: str
    session_id: str | None = None
    history: list[ChatTurn] = Field(default_factory=list)


def _get_db(request: Request) -> Session:
    """Get the database session from app state."""
    return request.app.state.db_factory()


async def _reply_stream(
    llm: LLMClient,
    body: ChatRequest,
    knowledge: list[AnalysisRecord],
    session_id: str,
) -> AsyncIterator[str]:
    # Headers are already sent once streaming starts, so a provider failure
    # can only be reported in-band.
    try:
        async for chunk in llm.stream_chat(body.message, body.history, knowledge):
            yield chunk
    except Exception:
        logger.exception("Chat stream failed (session=%s)", session_id)
        yield _FAILURE_TEXT


@router.post("/chat")
async def chat(body: ChatRequest, request: Request) -> StreamingResponse:
    """Stream a plain-text reply to *message*."""
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is empty")

    llm = llm_for_request(request)
    limit = request.app.state.settings.chat_context_limit
    db = _get_db(request)
    try:
        knowledge = AnalysisStore(db).list_analyses(limit=limit)
    finally:
        db.close()

    session_id = body.session_id or uuid.uuid4().hex
    logger.debug(
        "Chat request: session=%s history=%d knowledge=%d",
        session_id, len(body.history), len(knowledge),
    )
    return StreamingResponse(
        _reply_stream(llm, body, knowledge, session_id),
        media_type="text/plain; charset=utf-8",
        headers={"X-Session-Id": session_id},
    )
