"""Migration discovery, lock file and apply engine.

Modules
-------
defaults   default extension list and lock file name
config     MigrateConfig + load_config_file / new_config
discovery  directory and glob discovery, numeric ordering
lock       MigrationLock / MigrationRecord + load_lock / save_lock
engine     apply_migrations / pending_migrations
"""

from lockstep.migrations.config import MigrateConfig, load_config_file, new_config
from lockstep.migrations.engine import (
    MigrationRun,
    PendingMigration,
    apply_migrations,
    pending_migrations,
)
from lockstep.migrations.lock import (
    MigrationLock,
    MigrationRecord,
    load_lock,
    lock_has_file,
    save_lock,
)

__all__ = [
    "MigrateConfig",
    "load_config_file",
    "new_config",
    "MigrationRun",
    "PendingMigration",
    "apply_migrations",
    "pending_migrations",
    "MigrationLock",
    "MigrationRecord",
    "load_lock",
    "lock_has_file",
    "save_lock",
]
