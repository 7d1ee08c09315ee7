"""Migration configuration.

A ``MigrateConfig`` names the migration locations to scan, the recognized
file extensions, and the lock file. Configs are usually loaded from a JSON
file::

    {
      "paths": ["schema", "seeds/*.sql"],
      "file_extensions": [".sql"],
      "lock_file": ".migrate.lock.json"
    }

Relative locations and a relative lock file are resolved against the config
file's directory, so the same config works from any working directory. The
older ``dirs`` key is accepted in place of ``paths``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from lockstep.core.errors import ConfigError, InvalidConfigError
from lockstep.migrations.defaults import DEFAULT_FILE_EXTENSIONS, DEFAULT_LOCK_FILE


class MigrateConfig(BaseModel):
    """Where migrations live and where the ledger of applied ones is kept."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    paths: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("paths", "dirs"),
        description="Migration locations: directories or glob patterns",
    )
    file_extensions: list[str] | None = Field(
        default=None,
        description="Recognized extensions in directory locations (default: .sql)",
    )
    lock_file: str = Field(default="", description="Lock file path")

    @property
    def extensions(self) -> tuple[str, ...]:
        """Effective extension allow-list."""
        if self.file_extensions is None:
            return DEFAULT_FILE_EXTENSIONS
        return tuple(self.file_extensions)

    def add_path(self, *paths: str) -> None:
        """Append migration locations in the given order."""
        self.paths.extend(paths)

    def merge(self, other: MigrateConfig) -> None:
        """Append another config's locations after this config's own."""
        self.paths.extend(other.paths)

    def resolve(self, base_dir: str | Path) -> MigrateConfig:
        """Return a copy with locations and lock file anchored at *base_dir*.

        Absolute values are kept as-is. An empty lock file becomes
        ``DEFAULT_LOCK_FILE`` first.
        """
        base = Path(base_dir).resolve()
        lock_file = self.lock_file or DEFAULT_LOCK_FILE
        return self.model_copy(
            update={
                "paths": [_anchor(p, base) for p in self.paths],
                "file_extensions": None if self.file_extensions is None else list(self.file_extensions),
                "lock_file": _anchor(lock_file, base),
            }
        )


def _anchor(value: str, base: Path) -> str:
    path = Path(value)
    if path.is_absolute():
        return value
    return str(base / path)


def new_config(base_dir: str | Path, paths: list[str]) -> MigrateConfig:
    """Build a config in code, resolving *paths* against *base_dir*.

    Example::

        config = new_config(Path(__file__).parent, ["schema", "seeds/*.sql"])
    """
    return MigrateConfig(paths=list(paths)).resolve(base_dir)


def load_config_file(filename: str | Path) -> MigrateConfig:
    """Load and resolve a JSON config file.

    Raises:
        ConfigError: the file cannot be read
        InvalidConfigError: the file is not valid JSON or has the wrong shape
    """
    path = Path(filename)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"error reading config file {str(path)!r}", cause=e) from e

    try:
        config = MigrateConfig.model_validate_json(raw)
    except PydanticValidationError as e:
        raise InvalidConfigError(
            "config_file", str(path), f"parsing config file {str(path)!r} failed", cause=e
        ).with_context(filepath=str(path)) from e

    return config.resolve(path.parent)
