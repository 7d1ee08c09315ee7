"""Migration executors: run a statement batch against a database.

The engine needs exactly one capability from its database: execute the full
text of a migration file as one batch, raising on failure. That capability is
the ``MigrationExecutor`` protocol. ``create_executor()`` is the single entry
point that turns a URL or path into an executor.

Supported URL schemes
---------------------
==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:``                  sqlite3 RAM
``sqlite``          ``sqlite:///path/to/file.db``               sqlite3 file
``(file path)``     ``./data/app.db``                           sqlite3 file
``(any other)``     ``postgresql+psycopg://user:pw@host/db``    SQLAlchemy
==================  ==========================================  ============

Usage
-----
::

    from lockstep.core.connection import create_executor

    executor, info = create_executor("sqlite:///app.db")
    executor.execute_script("CREATE TABLE t (id INTEGER);")
    executor.close()

Neither executor retries, reconnects or wraps batches in its own transaction
beyond what the driver does for a single call.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from lockstep.core.errors import DatabaseError
from lockstep.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class MigrationExecutor(Protocol):
    """Anything that can run a migration's statement batch."""

    def execute_script(self, sql: str) -> None:
        """Execute *sql* as a single batch; raise on failure."""
        ...


# ── ExecutorInfo ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ExecutorInfo:
    """Metadata about an executor's database."""

    backend: str
    """Backend identifier: ``"sqlite"`` or the SQLAlchemy dialect name."""

    url: str
    """The original URL or path used to create the executor."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"


# ── Executors ────────────────────────────────────────────────────────────


class SqliteExecutor:
    """Runs batches through ``sqlite3.Connection.executescript``.

    ``executescript`` commits any pending transaction first and then runs the
    script as-is, so each migration's own ``BEGIN``/``COMMIT`` are honored.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def execute_script(self, sql: str) -> None:
        self._conn.executescript(sql)

    def close(self) -> None:
        self._conn.close()


class SqlAlchemyExecutor:
    """Runs batches through a SQLAlchemy engine at driver level.

    The batch is passed unmodified to the DBAPI cursor, so multi-statement
    support is whatever the driver provides (psycopg accepts it).
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def execute_script(self, sql: str) -> None:
        with self._engine.begin() as conn:
            conn.exec_driver_sql(sql)

    def close(self) -> None:
        self._engine.dispose()


# ── URL parsing ──────────────────────────────────────────────────────────


def _parse_url(db: str) -> tuple[str, str]:
    """Parse a database URL into (scheme, target).

    ``scheme`` is one of ``"memory"``, ``"sqlite"``, ``"file"``, ``"sqlalchemy"``.
    """
    if db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    for prefix in ("sqlite:///", "sqlite://"):
        if db.startswith(prefix):
            path = db[len(prefix):]
            if not path or path == ":memory:":
                return "memory", ":memory:"
            return "sqlite", path

    if "://" in db:
        return "sqlalchemy", db

    # Bare file path: treat as SQLite file
    return "file", db


# ── Main factory ─────────────────────────────────────────────────────────


def create_executor(db: str) -> tuple[SqliteExecutor | SqlAlchemyExecutor, ExecutorInfo]:
    """Create an executor from a URL, path, or keyword.

    Parameters
    ----------
    db:
        - ``"memory"`` / ``":memory:"``: in-memory SQLite
        - ``"path/to/file.db"`` or ``"sqlite:///path/to/file.db"``: SQLite file
        - any other ``scheme://`` URL: SQLAlchemy engine

    Returns
    -------
    tuple
        ``(executor, ExecutorInfo)``

    Raises
    ------
    DatabaseError
        The database cannot be opened or its driver is not installed.
        SQLAlchemy engines connect lazily, so an unreachable server only
        surfaces on the first batch.
    """
    scheme, target = _parse_url(db)

    try:
        if scheme == "memory":
            executor: SqliteExecutor | SqlAlchemyExecutor = SqliteExecutor(sqlite3.connect(":memory:"))
            info = ExecutorInfo(backend="sqlite", url=db)
        elif scheme in ("sqlite", "file"):
            resolved = str(Path(target).resolve())
            executor = SqliteExecutor(sqlite3.connect(resolved))
            info = ExecutorInfo(backend="sqlite", url=db, resolved_path=resolved)
        else:
            engine = create_engine(target)
            executor = SqlAlchemyExecutor(engine)
            info = ExecutorInfo(backend=engine.dialect.name, url=db)
    except (sqlite3.Error, SQLAlchemyError, ImportError) as e:
        raise DatabaseError(f"cannot open database {db!r}", cause=e).with_context(
            location=db
        ) from e

    logger.debug("executor.created", backend=info.backend, path=info.resolved_path)
    return executor, info
