"""SQLAlchemy database setup: one SQLite file per data directory."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

_DB_FILENAME = "phraseboard.db"


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def db_url_for_data_dir(data_dir: Path) -> str:
    """Return the SQLite URL for a data directory.

    The DB lives at ``<data_dir>/.phraseboard/phraseboard.db``, next to the
    log file.
    """
    db_path = data_dir / ".phraseboard" / _DB_FILENAME
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def get_engine(db_url: str) -> Engine:
    """Create a SQLAlchemy engine.

    Args:
        db_url: Database URL.  Pass "sqlite://" for an in-memory database (tests).
    """
    # In-memory SQLite needs StaticPool so all connections share the
    # same database (otherwise each connection gets its own empty DB).
    if db_url == "sqlite://":
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(db_url, connect_args={"check_same_thread": False})


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
    """Enable WAL mode and foreign keys for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a sessionmaker bound to the given engine."""
    return sessionmaker(bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to call repeatedly (CREATE IF NOT EXISTS)."""
    from phraseboard.server import models  # noqa: F401  (registers all tables)

    Base.metadata.create_all(bind=engine)
