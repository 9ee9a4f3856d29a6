"""Tests for the phraseboard serve command and FastAPI server."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from typer.testing import CliRunner

from phraseboard import __version__
from phraseboard.config import PhraseboardSettings
from phraseboard.server.app import create_app
from phraseboard.server.db import Base, db_url_for_data_dir, get_engine, init_db

runner = CliRunner()


@pytest.fixture()
def engine():
    """Create an in-memory SQLAlchemy engine for database tests."""
    return get_engine("sqlite://")


class TestHealthEndpoint:
    def test_returns_ok(self, client: TestClient) -> None:
        resp = client.get("/api/health")
        assert resp.status_code == 200

    def test_returns_version(self, client: TestClient) -> None:
        data = client.get("/api/health").json()
        assert data["version"] == __version__

    def test_returns_status(self, client: TestClient) -> None:
        data = client.get("/api/health").json()
        assert data["status"] == "ok"


class TestDatabase:
    def test_init_db_creates_tables(self, engine) -> None:  # type: ignore[no-untyped-def]
        init_db(engine)
        table_names = Base.metadata.tables.keys()
        assert "analyses" in table_names
        assert "transcripts" in table_names

    def test_init_db_is_idempotent(self, engine) -> None:  # type: ignore[no-untyped-def]
        init_db(engine)
        init_db(engine)  # should not raise

    def test_db_lives_in_dot_dir(self, tmp_path: Path) -> None:
        url = db_url_for_data_dir(tmp_path)
        assert url == f"sqlite:///{tmp_path / '.phraseboard' / 'phraseboard.db'}"
        assert (tmp_path / ".phraseboard").is_dir()


class TestAppFactory:
    def test_create_app_returns_fastapi(
        self, tmp_path: Path, offline_settings: PhraseboardSettings
    ) -> None:
        from fastapi import FastAPI

        app = create_app(data_dir=tmp_path, db_url="sqlite://", settings=offline_settings)
        assert isinstance(app, FastAPI)

    def test_state(self, tmp_path: Path, offline_settings: PhraseboardSettings) -> None:
        app = create_app(data_dir=tmp_path, db_url="sqlite://", settings=offline_settings)
        assert app.state.data_dir == tmp_path
        assert app.state.db_url == "sqlite://"
        assert app.state.settings is offline_settings
        assert app.state.llm is None
        assert (tmp_path / "uploads").is_dir()

    def test_file_database_created(
        self, tmp_path: Path, offline_settings: PhraseboardSettings
    ) -> None:
        create_app(data_dir=tmp_path, settings=offline_settings)
        assert (tmp_path / ".phraseboard" / "phraseboard.db").is_file()

    def test_dev_mounts_admin(self, tmp_path: Path, offline_settings: PhraseboardSettings) -> None:
        app = create_app(data_dir=tmp_path, dev=True, db_url="sqlite://", settings=offline_settings)
        resp = TestClient(app).get("/admin/", follow_redirects=True)
        assert resp.status_code == 200

    def test_no_admin_without_dev(self, client: TestClient) -> None:
        assert client.get("/admin/").status_code == 404

    def test_data_dir_recovered_from_env(
        self,
        tmp_path: Path,
        offline_settings: PhraseboardSettings,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("_PHRASEBOARD_DATA_DIR", str(tmp_path / "from-env"))
        app = create_app(db_url="sqlite://", settings=offline_settings)
        assert app.state.data_dir == tmp_path / "from-env"

    def test_provider_recovered_from_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("_PHRASEBOARD_LLM", "offline")
        app = create_app(data_dir=tmp_path, db_url="sqlite://")
        assert app.state.settings.llm_provider == "keywords"

    def test_uploads_served(self, client: TestClient) -> None:
        url = client.app.state.blob_store.put("call.txt", b"hello there")  # type: ignore[attr-defined]
        resp = client.get(url)
        assert resp.status_code == 200
        assert resp.text == "hello there"


class TestServeCommand:
    def test_serve_help_works(self) -> None:
        from phraseboard.cli import app

        result = runner.invoke(app, ["serve", "--help"])
        assert result.exit_code == 0
        assert "--port" in result.output
        assert "--dev" in result.output

    def test_serve_runs_uvicorn(self, tmp_path: Path) -> None:
        from phraseboard.cli import app

        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(
                app, ["serve", "--data-dir", str(tmp_path), "--llm", "offline", "-p", "9001"]
            )
        assert result.exit_code == 0, result.output
        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs["port"] == 9001

    def test_serve_dev_uses_factory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from phraseboard.cli import app

        import os

        # Registering the vars first makes monkeypatch remove whatever the command sets
        for var in ("_PHRASEBOARD_DATA_DIR", "_PHRASEBOARD_DEV", "_PHRASEBOARD_VERBOSE"):
            monkeypatch.setenv(var, "")
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve", "--dev", "--data-dir", str(tmp_path)])
        assert result.exit_code == 0, result.output
        args, kwargs = mock_run.call_args
        assert args[0] == "phraseboard.server.app:create_app"
        assert kwargs["factory"] is True
        assert kwargs["reload"] is True
        assert os.environ["_PHRASEBOARD_DEV"] == "1"
        assert os.environ["_PHRASEBOARD_DATA_DIR"] == str(tmp_path.resolve())
