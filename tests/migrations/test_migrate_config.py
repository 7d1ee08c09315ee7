"""Tests for lockstep.migrations.config."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lockstep.core.errors import ConfigError, InvalidConfigError
from lockstep.migrations.config import MigrateConfig, load_config_file, new_config
from lockstep.migrations.defaults import DEFAULT_FILE_EXTENSIONS, DEFAULT_LOCK_FILE


def _write_config(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestLoadConfigFile:
    def test_relative_paths_resolve_against_config_dir(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"paths": ["start/*.sql", "iter/*.sql"]})

        config = load_config_file(cfg)

        assert config.paths == [str(tmp_path.resolve() / "start/*.sql"), str(tmp_path.resolve() / "iter/*.sql")]

    def test_absolute_paths_kept(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"paths": ["/srv/schema"]})

        assert load_config_file(cfg).paths == ["/srv/schema"]

    def test_dirs_alias(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"dirs": ["schema"]})

        assert load_config_file(cfg).paths == [str(tmp_path.resolve() / "schema")]

    def test_default_lock_file(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"paths": []})

        config = load_config_file(cfg)

        assert config.lock_file == str(tmp_path.resolve() / DEFAULT_LOCK_FILE)
        assert config.lock_file != DEFAULT_LOCK_FILE

    def test_relative_lock_file(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"paths": [], "lock_file": "state/lock.json"})

        assert load_config_file(cfg).lock_file == str(tmp_path.resolve() / "state/lock.json")

    def test_absolute_lock_file(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"paths": [], "lock_file": "/var/lib/app/lock.json"})

        assert load_config_file(cfg).lock_file == "/var/lib/app/lock.json"

    def test_default_extensions(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"paths": []})

        config = load_config_file(cfg)

        assert config.file_extensions is None
        assert config.extensions == DEFAULT_FILE_EXTENSIONS

    def test_custom_extensions(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"paths": [], "file_extensions": [".sql", ".ddl"]})

        assert load_config_file(cfg).extensions == (".sql", ".ddl")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config_file(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path):
        cfg = tmp_path / "migrate.json"
        cfg.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            load_config_file(cfg)

    def test_unknown_key_rejected(self, tmp_path):
        cfg = _write_config(tmp_path / "migrate.json", {"paths": [], "directories": ["x"]})

        with pytest.raises(InvalidConfigError) as exc_info:
            load_config_file(cfg)

        # The validation detail names the offending key
        assert "directories" in str(exc_info.value)
        assert exc_info.value.cause is not None
        assert exc_info.value.context.filepath == str(cfg)


class TestNewConfig:
    def test_resolves_against_base_dir(self, tmp_path):
        config = new_config(tmp_path, ["start/*.sql", "iter/*.sql"])

        assert config.lock_file.endswith(DEFAULT_LOCK_FILE)
        assert config.lock_file != DEFAULT_LOCK_FILE
        assert len(config.paths) == 2
        assert config.paths[0].endswith("start/*.sql")
        assert config.paths[1].endswith("iter/*.sql")
        assert all(Path(p).is_absolute() for p in config.paths)


class TestConfigPaths:
    def test_add_path(self):
        c = MigrateConfig()
        c.add_path("/path1")
        assert c.paths == ["/path1"]
        c.add_path("/path2", "/path3")
        assert c.paths == ["/path1", "/path2", "/path3"]

    def test_merge(self):
        c1 = MigrateConfig(paths=["/path1", "/path2"])
        c2 = MigrateConfig(paths=["/path3", "/path4"])
        c1.merge(c2)
        assert c1.paths == ["/path1", "/path2", "/path3", "/path4"]
        assert c2.paths == ["/path3", "/path4"]
