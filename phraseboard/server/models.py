"""SQLAlchemy ORM models: uploaded transcripts and their analyses."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phraseboard.server.db import Base


class Transcript(Base):
    """An uploaded transcript file.

    file_path is the public URL the blob store returned, not a disk path.
    """

    __tablename__ = "transcripts"

    id: Mapped[int] = mapped_column(primary_key=True)
    file_name: Mapped[str] = mapped_column(String(500), default="unknown.txt")
    file_path: Mapped[str | None] = mapped_column(String(1000), default=None)
    created_at: Mapped[datetime] = mapped_column(default=func.now())

    analyses: Mapped[list[Analysis]] = relationship(back_populates="transcript")


class Analysis(Base):
    """One LLM analysis of a transcript.

    Phrase lists are JSON arrays.  Rows written by older versions or by hand
    may hold anything there; the store normalises on the way out.
    """

    __tablename__ = "analyses"

    id: Mapped[int] = mapped_column(primary_key=True)
    transcript_id: Mapped[int | None] = mapped_column(
        ForeignKey("transcripts.id"), default=None
    )
    summary: Mapped[str | None] = mapped_column(Text, default=None)
    positive_phrases: Mapped[list | None] = mapped_column(JSON, default=list)  # type: ignore[type-arg]
    negative_phrases: Mapped[list | None] = mapped_column(JSON, default=list)  # type: ignore[type-arg]
    created_at: Mapped[datetime] = mapped_column(default=func.now())

    transcript: Mapped[Transcript | None] = relationship(back_populates="analyses")
