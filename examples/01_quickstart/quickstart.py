#!/usr/bin/env python3
"""Quickstart: apply the schema/ migrations to a local sqlite file.

Run it twice: the first run applies all three files in numeric order
(``00``, ``01``, ``10``) and writes ``.migrate.lock.json`` next to
``migrate.json``; the second run finds nothing pending.

Equivalent CLI::

    lockstep apply -c examples/01_quickstart/migrate.json -d quickstart.db
"""

import sqlite3
import sys
from pathlib import Path

from lockstep import SqliteExecutor, apply_migrations, load_config_file
from lockstep.core.logging import configure_logging

HERE = Path(__file__).resolve().parent


def main() -> int:
    configure_logging(level="INFO", json_format=False)
    config = load_config_file(HERE / "migrate.json")

    conn = sqlite3.connect(HERE / "quickstart.db")
    try:
        run = apply_migrations(SqliteExecutor(conn), config)
    finally:
        conn.close()

    for record in run.results:
        print(f"applied {Path(record.filepath).name}  sha256={record.sum[:12]}")
    if not run.results:
        print("nothing pending")

    if not run.success:
        print(f"failed: {run.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
