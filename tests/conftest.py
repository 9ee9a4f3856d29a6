"""Shared test fixtures for Phraseboard tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from phraseboard.config import PhraseboardSettings
from phraseboard.phrases.models import AnalysisRecord


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def offline_settings(tmp_path: Path) -> PhraseboardSettings:
    """Settings using the offline keyword provider (no API key, no network)."""
    return PhraseboardSettings(llm_provider="keywords", data_dir=tmp_path)


@pytest.fixture
def client(tmp_path: Path, offline_settings: PhraseboardSettings) -> TestClient:
    """Test client with an in-memory SQLite database and the offline provider."""
    from phraseboard.server.app import create_app

    app = create_app(data_dir=tmp_path, db_url="sqlite://", settings=offline_settings)
    return TestClient(app)


@pytest.fixture
def sample_records() -> list[AnalysisRecord]:
    """Three stored analyses, newest first, as the store returns them."""
    return [
        AnalysisRecord(
            id=3,
            transcript_id=3,
            summary="Customer called about a refund.",
            positive_phrases=("quick refund",),
            negative_phrases=("long wait time", "Wait was long"),
            created_at=datetime(2026, 3, 3, 9, 0, tzinfo=timezone.utc),
        ),
        AnalysisRecord(
            id=2,
            transcript_id=2,
            summary="Billing question, resolved.",
            positive_phrases=("friendly agent", "helpful"),
            negative_phrases=("on hold",),
            created_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        ),
        AnalysisRecord(
            id=1,
            transcript_id=None,
            summary=None,
            positive_phrases=("Friendly Agent",),
            negative_phrases=(),
            created_at=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc),
        ),
    ]
