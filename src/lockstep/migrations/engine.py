"""Migration engine.

Applies pending migration files in order and records each success in the
lock file, so repeated runs only execute new files.

Manifesto:
    Database schemas must evolve safely across deployments. A run either
    applies everything that is pending or stops at the first failure and
    reports exactly what it managed to apply before that.

    - **Sequential:** One file at a time, in discovery order
    - **Idempotent:** Files already in the lock file are skipped by path
    - **Partial success:** Records applied before a failure are kept
    - **No retries:** Re-running after a fix is the recovery path

Run loop::

    load_lock ──► for location in config.paths:
                     for file in discover(location):
                         skip if lock_has_file
                         checksum ─► read ─► execute ─► record
                  ──► save_lock (once, only if anything was applied,
                                 also when the loop is interrupted)

Failure semantics:

=========================  =======================================
Failure                    Effect
=========================  =======================================
lock file unreadable       returned before the database is touched
location unreadable        run stops, earlier records returned
checksum / read            run stops, earlier records returned
execution                  run stops, failing file is not recorded
interrupted                earlier records saved, exception re-raised
lock file unwritable       ``LockPersistenceError`` is raised
=========================  =======================================

Tags:
    lockstep, migrations, schema, database, idempotent, DDL

Doc-Types:
    package-overview
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lockstep.core.connection import MigrationExecutor
from lockstep.core.errors import (
    LockPersistenceError,
    LockstepError,
    MigrationExecutionError,
    MigrationReadError,
)
from lockstep.core.hashing import file_checksum
from lockstep.core.logging import LogContext, get_logger
from lockstep.core.timestamps import utc_now
from lockstep.migrations.config import MigrateConfig
from lockstep.migrations.discovery import discover
from lockstep.migrations.lock import MigrationLock, MigrationRecord, load_lock, lock_has_file, save_lock

logger = get_logger(__name__)


@dataclass
class MigrationRun:
    """Outcome of ``apply_migrations``.

    ``results`` holds the migrations applied by this call, in order, even
    when ``error`` is set.
    """

    results: list[MigrationRecord] = field(default_factory=list)
    error: LockstepError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise ``error`` if the run failed."""
        if self.error is not None:
            raise self.error


@dataclass(frozen=True)
class PendingMigration:
    """A discovered file not yet recorded in the lock file."""

    filepath: str
    location: str


def apply_migrations(executor: MigrationExecutor, config: MigrateConfig) -> MigrationRun:
    """Apply every pending migration under *config* through *executor*.

    Returns a ``MigrationRun`` with the newly applied records and, on
    failure, the first error encountered.

    Raises:
        LockPersistenceError: migrations ran but the lock file could not be
            updated. The database and lock file now disagree.
    """
    with LogContext(lock_file=config.lock_file):
        try:
            lock = load_lock(config.lock_file)
        except LockstepError as e:
            logger.error("migration.lock_load_failed", **e.to_dict())
            return MigrationRun(error=e)

        logger.info(
            "migration.run_started",
            locations=len(config.paths),
            recorded=len(lock.migrations),
        )
        run = MigrationRun()
        try:
            _apply_locations(executor, config, lock, run)
        finally:
            # Files already applied are recorded even when the loop is
            # interrupted (KeyboardInterrupt, SystemExit)
            if run.results:
                _persist(config.lock_file, lock, run.results)

        logger.info("migration.run_finished", applied=len(run.results), success=run.success)
        return run


def _apply_locations(
    executor: MigrationExecutor, config: MigrateConfig, lock: MigrationLock, run: MigrationRun
) -> None:
    for location in config.paths:
        try:
            candidates = discover(location, config.extensions)
        except LockstepError as e:
            logger.error("migration.discovery_failed", **e.to_dict())
            run.error = e
            return

        for path in candidates:
            filepath = str(path)
            if lock_has_file(lock, filepath):
                logger.debug("migration.skipped", filepath=filepath)
                continue

            try:
                record = _apply_file(executor, path)
            except LockstepError as e:
                logger.error("migration.failed", **e.to_dict())
                run.error = e
                return

            run.results.append(record)
            lock.add(record)
            logger.info("migration.applied", filepath=filepath, sum=record.sum)


def _apply_file(executor: MigrationExecutor, path: Path) -> MigrationRecord:
    filepath = str(path)
    checksum = file_checksum(path)

    try:
        sql = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MigrationReadError(
            f"error reading migration file {filepath!r}", cause=e
        ).with_context(filepath=filepath) from e

    try:
        executor.execute_script(sql)
    except Exception as e:
        raise MigrationExecutionError(
            f"error executing migration file {filepath!r}", cause=e
        ).with_context(filepath=filepath) from e

    return MigrationRecord(filepath=filepath, timestamp=utc_now(), sum=checksum)


def _persist(lock_file: str, lock: MigrationLock, results: list[MigrationRecord]) -> None:
    try:
        save_lock(lock_file, lock)
    except LockPersistenceError as e:
        e.results = list(results)
        logger.critical(
            "migration.lock_save_failed",
            unrecorded=[r.filepath for r in results],
            **e.to_dict(),
        )
        raise
    logger.info("migration.lock_saved", recorded=len(lock.migrations))


def pending_migrations(
    config: MigrateConfig, lock: MigrationLock | None = None
) -> list[PendingMigration]:
    """List discovered files that are not yet in the lock file.

    Nothing is executed and the lock file is not written. *lock* is read
    from ``config.lock_file`` unless the caller already has it.

    Raises:
        LockFileError: the lock file cannot be decoded
        DiscoveryError: a location cannot be listed
    """
    if lock is None:
        lock = load_lock(config.lock_file)
    pending = []
    for location in config.paths:
        for path in discover(location, config.extensions):
            if not lock_has_file(lock, str(path)):
                pending.append(PendingMigration(filepath=str(path), location=location))
    return pending
