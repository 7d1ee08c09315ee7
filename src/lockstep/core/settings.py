"""Environment-driven settings for lockstep.

Credentials and deployment-specific paths never live in the migration config
file. They come from ``LOCKSTEP_*`` environment variables or from ``.env`` /
``.migrate.env`` files next to the working directory.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not mid-run
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** Works out of the box for local sqlite

Examples:
    >>> import os
    >>> os.environ["LOCKSTEP_DATABASE_URL"] = "sqlite:///app.db"
    >>> get_settings().database_url
    'sqlite:///app.db'

Tags:
    settings, configuration, pydantic, environment, lockstep
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lockstep.migrations.defaults import DEFAULT_CONFIG_FILE


class LockstepSettings(BaseSettings):
    """lockstep runtime settings.

    Fields
    ──────
    config_file   : Path to the JSON migration config
    database_url  : Target database (``sqlite:///app.db``, ``postgresql://…``)
    log_level     : Structlog log level
    log_format    : ``json``, ``console`` or ``auto`` (JSON unless on a tty)
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCKSTEP_",
        env_file=(".env", ".migrate.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Migrations ───────────────────────────────────────────────
    config_file: Path = Field(default=Path(DEFAULT_CONFIG_FILE))
    database_url: str | None = Field(default=None, description="Target database URL or sqlite path")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="auto")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v!r}")
        return level

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in {"json", "console", "auto"}:
            raise ValueError(f"unknown log format: {v!r}")
        return fmt

    @property
    def json_logs(self) -> bool | None:
        """``configure_logging`` flag: True/False, or None to auto-detect."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"


def get_settings() -> LockstepSettings:
    """Build settings from the current environment."""
    return LockstepSettings()
