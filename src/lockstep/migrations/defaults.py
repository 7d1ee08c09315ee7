"""Default values merged into a ``MigrateConfig`` when it is built."""

from __future__ import annotations

#: Extensions recognized in directory locations when a config lists none.
DEFAULT_FILE_EXTENSIONS: tuple[str, ...] = (".sql",)

#: Lock file name, resolved relative to the config file's directory.
DEFAULT_LOCK_FILE = ".migrate.lock.json"

#: Config file looked up by the CLI when none is given.
DEFAULT_CONFIG_FILE = "migrate.json"
