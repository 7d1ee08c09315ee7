"""
Root Typer application for the lockstep CLI.

    lockstep apply  --config db/migrate.json --database sqlite:///app.db
    lockstep status --config db/migrate.json

Exit codes: 0 success, 1 configuration or migration error, 2 lock file could
not be written after migrations ran (manual reconciliation needed).
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path

import typer
from typer import Typer

from lockstep.cli.utils import (
    console,
    fail,
    load_settings,
    print_json,
    print_pending,
    print_records,
    record_to_dict,
    resolve_config,
)
from lockstep.core.connection import create_executor
from lockstep.core.errors import LockPersistenceError, LockstepError, MissingConfigError
from lockstep.migrations.engine import apply_migrations, pending_migrations
from lockstep.migrations.lock import load_lock

app = Typer(
    name="lockstep",
    help="Apply ordered SQL migrations and track them in a lock file.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

EXIT_PERSISTENCE_FAILURE = 2


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("lockstep")
        except PackageNotFoundError:
            from lockstep import __version__ as v
        typer.echo(f"lockstep {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """lockstep CLI: apply migrations and inspect the lock file."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def apply(
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Migration config (JSON)"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL or sqlite path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Apply pending migrations and record them in the lock file."""
    settings = load_settings()
    config = resolve_config(config_file, settings)

    url = database or settings.database_url
    if not url:
        fail(MissingConfigError("database_url", "No database given: use --database or LOCKSTEP_DATABASE_URL"))

    try:
        executor, _info = create_executor(url)
    except LockstepError as e:
        fail(e)

    try:
        run = apply_migrations(executor, config)
    except LockPersistenceError as e:
        unrecorded = [r.filepath for r in e.results]
        if json_out:
            print_json({"applied": [record_to_dict(r) for r in e.results], "error": e.to_dict()})
        else:
            console.print("[bold red]Applied to the database but NOT recorded in the lock file:[/bold red]")
            for filepath in unrecorded:
                console.print(f"  {filepath}", soft_wrap=True)
        fail(e, code=EXIT_PERSISTENCE_FAILURE)
    finally:
        executor.close()

    if json_out:
        print_json({
            "applied": [record_to_dict(r) for r in run.results],
            "error": run.error.to_dict() if run.error else None,
        })
    elif run.results:
        print_records(run.results, title="Applied migrations")
    elif run.success:
        console.print("No pending migrations.")

    if run.error is not None:
        fail(run.error)


@app.command()
def status(
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Migration config (JSON)"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show recorded and pending migrations without touching the database."""
    settings = load_settings()
    config = resolve_config(config_file, settings)

    try:
        lock = load_lock(config.lock_file)
        pending = pending_migrations(config, lock)
    except LockstepError as e:
        fail(e)

    if json_out:
        print_json({
            "lock_file": config.lock_file,
            "applied": [record_to_dict(r) for r in lock.migrations],
            "pending": [p.filepath for p in pending],
        })
        return

    print_records(lock.migrations, title=f"Recorded in {config.lock_file}")
    if pending:
        print_pending(pending)
    else:
        console.print("No pending migrations.")


if __name__ == "__main__":
    app()
