"""Lock file: the ledger of applied migrations.

The lock file is an indented JSON document with a single ``migrations`` list,
one record per applied file in application order::

    {
      "migrations": [
        {
          "filepath": "/srv/app/db/00-create-tables.sql",
          "timestamp": "2026-03-01T09:30:00.123456Z",
          "sum": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"
        }
      ]
    }

Membership is keyed on ``filepath`` alone. ``sum`` is recorded for audit
only; a file edited after it was applied is not re-applied.

Timestamps keep microsecond precision. Nanosecond timestamps written by
other tools load fine but are truncated when the file is saved again.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from lockstep.core.errors import LockFileError, LockPersistenceError


class MigrationRecord(BaseModel):
    """One applied migration. Immutable once created."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    filepath: str
    timestamp: datetime
    sum: str


class MigrationLock(BaseModel):
    """Ordered, append-only ledger of applied migrations."""

    model_config = ConfigDict(extra="forbid")

    migrations: list[MigrationRecord] = Field(default_factory=list)

    @field_validator("migrations", mode="before")
    @classmethod
    def _null_is_empty(cls, v: object) -> object:
        # An empty ledger may be written as "migrations": null
        return [] if v is None else v

    def add(self, *records: MigrationRecord) -> None:
        self.migrations.extend(records)


def lock_has_file(lock: MigrationLock, filepath: str) -> bool:
    """True if *filepath* is recorded in *lock* (exact string match)."""
    for record in lock.migrations:
        if record.filepath == filepath:
            return True
    return False


def load_lock(path: str | Path) -> MigrationLock:
    """Load the ledger from *path*.

    A missing file is the normal first-run state and yields an empty ledger.

    Raises:
        LockFileError: the file exists but cannot be read or decoded
    """
    path = Path(path)
    if not path.exists():
        return MigrationLock()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LockFileError(
            f"error reading lock file {str(path)!r}", cause=e
        ).with_context(lock_file=str(path)) from e

    try:
        return MigrationLock.model_validate_json(raw)
    except PydanticValidationError as e:
        raise LockFileError(
            f"parsing lock file {str(path)!r} failed", cause=e
        ).with_context(lock_file=str(path)) from e


def dump_lock(lock: MigrationLock) -> str:
    """Serialize the ledger as indented JSON with a trailing newline."""
    return lock.model_dump_json(indent=2) + "\n"


def save_lock(path: str | Path, lock: MigrationLock) -> None:
    """Write the ledger to *path*, replacing any previous content.

    Raises:
        LockPersistenceError: the file cannot be written
    """
    path = Path(path)
    try:
        path.write_text(dump_lock(lock), encoding="utf-8")
    except OSError as e:
        raise LockPersistenceError(
            f"cannot write lock file {str(path)!r}", cause=e
        ).with_context(lock_file=str(path)) from e
