"""
CLI utility helpers: settings resolution and output formatting.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from lockstep.core.errors import LockstepError
from lockstep.core.logging import configure_logging
from lockstep.core.settings import LockstepSettings, get_settings
from lockstep.core.timestamps import to_iso8601
from lockstep.migrations.config import MigrateConfig, load_config_file
from lockstep.migrations.engine import PendingMigration
from lockstep.migrations.lock import MigrationRecord

console = Console()
err_console = Console(stderr=True)


# ── Setup helpers ────────────────────────────────────────────────────────


def load_settings() -> LockstepSettings:
    """Read settings and configure logging from them."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    return settings


def resolve_config(config_file: Path | None, settings: LockstepSettings) -> MigrateConfig:
    """Load the migration config named on the command line or in settings."""
    path = config_file or settings.config_file
    try:
        return load_config_file(path)
    except LockstepError as e:
        fail(e)


def fail(error: LockstepError | str, *, code: int = 1) -> NoReturn:
    """Print an error and exit with *code*."""
    if isinstance(error, LockstepError):
        err_console.print(
            f"[bold red]Error[/bold red] ({error.category.value}): {error}"
        )
    else:
        err_console.print(f"[bold red]Error[/bold red]: {error}")
    raise typer.Exit(code=code)


# ── Output helpers ───────────────────────────────────────────────────────


def record_to_dict(record: MigrationRecord) -> dict[str, Any]:
    return record.model_dump(mode="json")


def print_records(records: list[MigrationRecord], *, title: str) -> None:
    """Render applied records as a rich table."""
    table = Table(title=title)
    table.add_column("File", style="cyan")
    table.add_column("Applied at")
    table.add_column("Checksum", style="dim")
    for record in records:
        table.add_row(record.filepath, to_iso8601(record.timestamp) or "", record.sum[:12])
    console.print(table)


def print_pending(pending: list[PendingMigration]) -> None:
    table = Table(title="Pending migrations")
    table.add_column("File", style="yellow")
    table.add_column("Location", style="dim")
    for item in pending:
        table.add_row(item.filepath, item.location)
    console.print(table)


def print_json(payload: Any) -> None:
    # Plain echo: rich would soft-wrap long paths and break the JSON
    typer.echo(json.dumps(payload, indent=2, default=str))
