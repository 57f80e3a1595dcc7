"""SQLAlchemy database setup for jpreader."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Iterator

    from sqlalchemy.orm import Session

#: The default database name.
DEFAULT_DB_NAME: Final[str] = "reader.db"
#: The name of the per-user application directory.
APP_DIR_NAME: Final[str] = "jpreader"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""


def get_reader_db_path() -> Path:
    """
    Get the path to the reader database.

    - On Windows, the database is created in the user's
        ``AppData/Local/jpreader`` directory.
    - On macOS, the database is created in the user's
        ``~/Library/Application Support/jpreader`` directory.
    - On Linux, the database is created in the user's
        ``~/.config/jpreader`` directory.
    - If the platform is not supported, raise a ValueError.

    Returns:
        Path to the database file

    """
    if sys.platform not in ["win32", "darwin", "linux"]:
        msg = f"Unsupported platform: {sys.platform}"
        raise ValueError(msg)
    if sys.platform == "win32":
        db_path = Path.home() / "AppData" / "Local" / APP_DIR_NAME
    elif sys.platform == "darwin":
        db_path = Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    elif sys.platform == "linux":
        db_path = Path.home() / ".config" / APP_DIR_NAME
    db_path.mkdir(parents=True, exist_ok=True)
    return db_path / DEFAULT_DB_NAME


def create_engine_with_path(db_path: Path | None = None) -> Engine:
    """
    Create SQLAlchemy engine with proper SQLite settings.

    Args:
        db_path: Optional path to database file. If None, uses default path.

    Returns:
        SQLAlchemy engine

    """
    if db_path is None:
        db_path = get_reader_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path.touch(exist_ok=True)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(
        dbapi_conn: sqlite3.Connection | Any, _connection_record: Any
    ) -> None:
        """Set SQLite pragmas on connection."""
        cursor = cast("sqlite3.Cursor", dbapi_conn.cursor())
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def init_db(engine: Engine) -> None:
    """
    Create every table that does not exist yet.

    Args:
        engine: SQLAlchemy engine

    """
    # Register every model on Base.metadata before creating tables
    import jpreader.models  # noqa: F401, PLC0415

    Base.metadata.create_all(engine)


#: Session factory; bound to an engine by :func:`configure_session`.
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def configure_session(db_path: Path | None = None) -> Engine:
    """
    Create the engine for ``db_path``, create the schema and bind
    :data:`SessionLocal` to it.

    Args:
        db_path: Optional path to database file. If None, uses default path.

    Returns:
        The bound SQLAlchemy engine

    """
    engine = create_engine_with_path(db_path)
    init_db(engine)
    SessionLocal.configure(bind=engine)
    return engine


def get_session() -> Iterator[Session]:
    """
    Get a database session.

    Yields:
        SQLAlchemy session

    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
