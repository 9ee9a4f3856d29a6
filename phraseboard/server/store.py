"""Record store for analyses: the only place ORM rows become core records.

The aggregation and filtering code only ever sees :class:`AnalysisRecord`.
Whatever sits in the JSON phrase columns (``None``, a bare string, numbers
mixed in) is normalised here so the core can stay strict.
"""

from __future__ import annotations

import logging
from typing import Literal

from sqlalchemy import select
from sqlalchemy.orm import Session

from phraseboard.llm.structured import TranscriptAnalysis
from phraseboard.phrases.models import AnalysisRecord
from phraseboard.server.models import Analysis, Transcript

logger = logging.getLogger(__name__)

Order = Literal["newest", "oldest"]


def _phrase_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(p for p in value if isinstance(p, str))


def record_from_row(row: Analysis) -> AnalysisRecord:
    """Convert an ORM row to the strict core record shape."""
    return AnalysisRecord(
        id=row.id,
        transcript_id=row.transcript_id,
        summary=row.summary if isinstance(row.summary, str) else None,
        positive_phrases=_phrase_tuple(row.positive_phrases),
        negative_phrases=_phrase_tuple(row.negative_phrases),
        created_at=row.created_at,
    )


class AnalysisStore:
    """Insert and query analyses through one SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def insert_transcript(self, file_name: str | None, file_path: str | None) -> int:
        row = Transcript(file_name=file_name or "unknown.txt", file_path=file_path)
        self.db.add(row)
        self.db.commit()
        logger.info("Stored transcript #%d (%s)", row.id, row.file_name)
        return row.id

    def insert_analysis(self, transcript_id: int | None, result: TranscriptAnalysis) -> int:
        row = Analysis(
            transcript_id=transcript_id,
            summary=result.summary,
            positive_phrases=list(result.positive_phrases),
            negative_phrases=list(result.negative_phrases),
        )
        self.db.add(row)
        self.db.commit()
        logger.info(
            "Stored analysis #%d: %d positive, %d negative phrases",
            row.id,
            len(result.positive_phrases),
            len(result.negative_phrases),
        )
        return row.id

    def query(
        self,
        *,
        transcript_id: int | None = None,
        order: Order = "newest",
        limit: int | None = None,
    ) -> list[AnalysisRecord]:
        """Analyses, optionally for one transcript, ordered by creation time.

        Rows created within the same second are ordered by id.
        """
        stmt = select(Analysis)
        if transcript_id is not None:
            stmt = stmt.where(Analysis.transcript_id == transcript_id)
        if order == "newest":
            stmt = stmt.order_by(Analysis.created_at.desc(), Analysis.id.desc())
        else:
            stmt = stmt.order_by(Analysis.created_at.asc(), Analysis.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return [record_from_row(row) for row in self.db.scalars(stmt)]

    def list_analyses(self, limit: int | None = None) -> list[AnalysisRecord]:
        """All analyses, newest first."""
        return self.query(order="newest", limit=limit)

    def get(self, analysis_id: int) -> AnalysisRecord | None:
        row = self.db.get(Analysis, analysis_id)
        return record_from_row(row) if row is not None else None
