"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from phraseboard.config import PhraseboardSettings, load_settings
from phraseboard.server.db import create_session_factory, db_url_for_data_dir, get_engine, init_db
from phraseboard.server.routes.chat import router as chat_router
from phraseboard.server.routes.health import router as health_router
from phraseboard.server.routes.pages import router as pages_router
from phraseboard.server.routes.results import router as results_router
from phraseboard.server.routes.transcripts import router as transcripts_router
from phraseboard.server.storage import BlobStore

logger = logging.getLogger(__name__)

_UPLOADS_DIRNAME = "uploads"


def create_app(
    data_dir: Path | None = None,
    dev: bool = False,
    db_url: str | None = None,
    verbose: bool = False,
    settings: PhraseboardSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        data_dir: Directory holding the SQLite DB, uploads and log file.
                  Defaults to ``settings.data_dir``.
        dev: When True, mount the SQLAdmin database browser at ``/admin``.
        db_url: Override database URL (e.g. "sqlite://" for in-memory tests).
        verbose: When True, terminal handler shows DEBUG-level messages.
        settings: Preloaded settings; loaded from the environment when omitted.

    In ``--dev`` mode uvicorn calls this factory with no arguments on reload.
    The CLI stashes its options in ``_PHRASEBOARD_*`` env vars so the factory
    can recover them.
    """
    if data_dir is None:
        env_dir = os.environ.get("_PHRASEBOARD_DATA_DIR")
        if env_dir:
            data_dir = Path(env_dir)
    if not dev and os.environ.get("_PHRASEBOARD_DEV") == "1":
        dev = True
    if not verbose and os.environ.get("_PHRASEBOARD_VERBOSE") == "1":
        verbose = True

    if settings is None:
        settings = load_settings(llm_provider=os.environ.get("_PHRASEBOARD_LLM"))
    if data_dir is None:
        data_dir = settings.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)

    from phraseboard.logging import setup_logging

    setup_logging(data_dir=data_dir, verbose=verbose)

    app = FastAPI(title="Phraseboard", docs_url="/api/docs", redoc_url=None)

    if db_url is None:
        db_url = db_url_for_data_dir(data_dir)

    engine = get_engine(db_url)
    init_db(engine)

    app.state.db_factory = create_session_factory(engine)
    app.state.db_url = db_url
    app.state.data_dir = data_dir
    app.state.settings = settings
    app.state.llm = None  # created on first use, see server.ingest.llm_for_request
    app.state.blob_store = BlobStore(data_dir / _UPLOADS_DIRNAME)

    app.include_router(health_router)
    app.include_router(transcripts_router)
    app.include_router(results_router)
    app.include_router(chat_router)
    app.include_router(pages_router)

    app.mount(
        "/uploads",
        StaticFiles(directory=data_dir / _UPLOADS_DIRNAME),
        name="uploads",
    )

    if dev:
        # SQLAdmin database browser (dev-only)
        from sqladmin import Admin as SQLAdmin

        from phraseboard.server.admin import register_admin_views

        sqladmin_app = SQLAdmin(app, engine, base_url="/admin")
        register_admin_views(sqladmin_app)

    logger.info(
        "Phraseboard app ready: data_dir=%s provider=%s dev=%s",
        data_dir, settings.llm_provider, dev,
    )
    return app
