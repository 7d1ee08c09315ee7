"""
Shared pytest fixtures and configuration for lockstep tests.

This module provides:
- Logging reset between tests
- Migration directory / config / lock file builders on ``tmp_path``
- sqlite3 executors and a recording fake executor

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.
"""

import sqlite3
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

# Ensure lockstep package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lockstep.core.connection import SqliteExecutor
from lockstep.migrations.config import MigrateConfig, new_config


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Logging Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """
    Restore structlog defaults after each test.

    CLI tests configure logging against the runner's temporary streams;
    later tests must not write to those closed streams.
    """
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Migration Fixtures
# =============================================================================


class RecordingExecutor:
    """Fake executor that records batches and fails on demand."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.executed: list[str] = []

    def execute_script(self, sql: str) -> None:
        if self.fail_on is not None and self.fail_on in sql:
            raise RuntimeError(f"syntax error near {self.fail_on!r}")
        self.executed.append(sql)


@pytest.fixture
def write_migrations() -> Callable[..., Path]:
    """
    Write ``{name: sql}`` into a directory and return it.

        d = write_migrations(tmp_path / "schema", {"00-a.sql": "CREATE ..."})
    """

    def _write(directory: Path, files: dict[str, str]) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        for name, sql in files.items():
            (directory / name).write_text(sql, encoding="utf-8")
        return directory

    return _write


@pytest.fixture
def schema_dir(tmp_path: Path, write_migrations) -> Path:
    """Directory with three numbered table migrations."""
    return write_migrations(
        tmp_path.resolve() / "schema",
        {
            "00-create-users.sql": "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT);",
            "01-create-posts.sql": "CREATE TABLE posts (id INTEGER PRIMARY KEY, user_id INTEGER);",
            "2-insert-users.sql": "INSERT INTO users (name) VALUES ('ada'), ('grace');",
        },
    )


@pytest.fixture
def migrate_config(tmp_path: Path, schema_dir: Path) -> MigrateConfig:
    """Config pointing at ``schema_dir`` with the lock file in ``tmp_path``."""
    return new_config(tmp_path, ["schema"])


@pytest.fixture
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory SQLite connection."""
    c = sqlite3.connect(":memory:")
    yield c
    c.close()


@pytest.fixture
def executor(conn: sqlite3.Connection) -> SqliteExecutor:
    return SqliteExecutor(conn)


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


def table_names(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    return {r[0] for r in rows}


@pytest.fixture
def make_recording_executor() -> Callable[..., RecordingExecutor]:
    """Factory for ``RecordingExecutor`` instances (``fail_on`` optional)."""
    return RecordingExecutor


@pytest.fixture
def list_tables() -> Callable[[sqlite3.Connection], set[str]]:
    return table_names
