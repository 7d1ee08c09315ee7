"""
lockstep - ordered, idempotent SQL migrations tracked in a lock file.

Usage::

    import sqlite3
    from lockstep import SqliteExecutor, apply_migrations, load_config_file

    config = load_config_file("db/migrate.json")
    run = apply_migrations(SqliteExecutor(sqlite3.connect("app.db")), config)
    run.raise_for_error()
"""

__version__ = "0.1.0"

from lockstep.core.connection import (
    MigrationExecutor,
    SqlAlchemyExecutor,
    SqliteExecutor,
    create_executor,
)
from lockstep.core.errors import LockPersistenceError, LockstepError
from lockstep.migrations import (
    MigrateConfig,
    MigrationLock,
    MigrationRecord,
    MigrationRun,
    PendingMigration,
    apply_migrations,
    load_config_file,
    load_lock,
    new_config,
    pending_migrations,
    save_lock,
)

__all__ = [
    "__version__",
    "MigrationExecutor",
    "SqliteExecutor",
    "SqlAlchemyExecutor",
    "create_executor",
    "LockstepError",
    "LockPersistenceError",
    "MigrateConfig",
    "MigrationLock",
    "MigrationRecord",
    "MigrationRun",
    "PendingMigration",
    "apply_migrations",
    "pending_migrations",
    "load_config_file",
    "new_config",
    "load_lock",
    "save_lock",
]
