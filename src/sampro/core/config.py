"""SAM Pro configuration: Pydantic model, load, and save."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from sampro.core.constants import CONFIG_FILENAME, SAMPRO_DIR_NAME, SESSION_DIR_NAME
from sampro.core.exceptions import ConfigError


def sampro_dir() -> Path:
    """Return the SAM Pro home directory (~/.sampro), creating it if needed."""
    d = Path.home() / SAMPRO_DIR_NAME
    d.mkdir(mode=0o700, parents=True, exist_ok=True)
    return d


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class StorageConfig(BaseModel):
    data_dir: str = ""  # empty → use ~/.sampro

    @field_validator("data_dir")
    @classmethod
    def strip_data_dir(cls, v: str) -> str:
        return v.strip()


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class SamProConfig(BaseModel):
    """Root SAM Pro configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def data_dir(self) -> Path:
        if self.storage.data_dir:
            return Path(self.storage.data_dir).expanduser()
        return sampro_dir()

    @property
    def session_dir(self) -> Path:
        return self.data_dir / SESSION_DIR_NAME


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("SAMPRO_CONFIG"):
        return Path(env_path)
    return Path.home() / SAMPRO_DIR_NAME / CONFIG_FILENAME


def load_config(path: Path | None = None) -> SamProConfig:
    """
    Load SamProConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (SAMPRO_*)
      2. Config file (~/.sampro/config.toml)
      3. Built-in defaults (a missing file is not an error)
    """
    import tomllib

    cfg_path = path or _config_file_path()

    data: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except Exception as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc

    _apply_env_overrides(data)

    try:
        return SamProConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay SAMPRO_* environment variables onto the parsed TOML data."""
    if data_dir := os.environ.get("SAMPRO_DATA_DIR"):
        data.setdefault("storage", {})["data_dir"] = data_dir
    if level := os.environ.get("SAMPRO_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("SAMPRO_LOG_FORMAT"):
        data.setdefault("logging", {})["format"] = fmt


def save_config(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """Write config dict to TOML file with secure permissions (0600)."""
    import tomli_w

    cfg_path = path or _config_file_path()
    cfg_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    # Write atomically
    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config_data, f)
        tmp_path.rename(cfg_path)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    cfg_path.chmod(0o600)
    return cfg_path
