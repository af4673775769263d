"""Tests for sampro.core.config — TOML config, env overrides and save."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from sampro.core.config import LoggingConfig, SamProConfig, load_config, save_config
from sampro.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for var in ("SAMPRO_CONFIG", "SAMPRO_DATA_DIR", "SAMPRO_LOG_LEVEL", "SAMPRO_LOG_FORMAT"):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(tmp_path / "absent.toml")
        assert cfg.logging.level == "WARNING"
        assert cfg.logging.format == "text"
        assert cfg.storage.data_dir == ""

    def test_default_data_dir_is_home(self, tmp_path: Path) -> None:
        cfg = SamProConfig()
        assert cfg.data_dir == tmp_path / "home" / ".sampro"
        assert cfg.data_dir.is_dir()
        assert cfg.session_dir == cfg.data_dir / "session"


class TestLoad:
    def test_reads_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[storage]\ndata_dir = " /srv/sampro "\n\n[logging]\nlevel = "debug"\n')
        cfg = load_config(path)
        assert cfg.data_dir == Path("/srv/sampro")
        assert cfg.logging.level == "DEBUG"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[logging]\nlevel = "ERROR"\n')
        monkeypatch.setenv("SAMPRO_LOG_LEVEL", "info")
        monkeypatch.setenv("SAMPRO_LOG_FORMAT", "JSON")
        monkeypatch.setenv("SAMPRO_DATA_DIR", str(tmp_path / "data"))
        cfg = load_config(path)
        assert cfg.logging.level == "INFO"
        assert cfg.logging.format == "json"
        assert cfg.data_dir == tmp_path / "data"

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "elsewhere.toml"
        path.write_text('[logging]\nformat = "json"\n')
        monkeypatch.setenv("SAMPRO_CONFIG", str(path))
        assert load_config().logging.format == "json"

    def test_malformed_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[storage\n")
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[logging]\nlevel = "LOUD"\n')
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_invalid_format(self) -> None:
        with pytest.raises(ValueError):
            LoggingConfig(format="xml")


class TestSave:
    def test_round_trip(self, tmp_path: Path) -> None:
        path = save_config({"storage": {"data_dir": "/data"}, "logging": {"level": "INFO"}}, tmp_path / "c" / "config.toml")
        cfg = load_config(path)
        assert cfg.storage.data_dir == "/data"
        assert cfg.logging.level == "INFO"

    def test_permissions(self, tmp_path: Path) -> None:
        path = save_config({"logging": {"level": "INFO"}}, tmp_path / "config.toml")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert not path.with_suffix(".tmp").exists()
