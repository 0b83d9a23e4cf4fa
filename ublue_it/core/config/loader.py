"""
Configuration loader — reads config.yml into a validated Config model.

Configuration is optional. When present it supplies defaults for the
rebase flags and the locations ublue-it reads from and writes to.
Precedence, highest first:

    CLI flags  >  config file  >  built-in defaults

The file is looked up in this order:

    --config PATH
    $UBLUE_IT_CONFIG
    $XDG_CONFIG_HOME/ublue-it/config.yml  (~/.config/ublue-it/config.yml)
    /etc/ublue-it/config.yml
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ublue_it.core.models.image import DEFAULT_DESKTOP
from ublue_it.core.services.os_release import FEDORA_RELEASE_FILE

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yml"
CONFIG_ENV_VAR = "UBLUE_IT_CONFIG"
SYSTEM_CONFIG_PATH = Path("/etc/ublue-it") / CONFIG_FILE


class ConfigError(Exception):
    """Raised when the configuration file is invalid or unreadable."""


def _xdg_dir(env_var: str, fallback: str) -> Path:
    value = os.environ.get(env_var)
    return Path(value) if value else Path.home() / fallback


def default_state_dir() -> Path:
    """Where the audit ledger lives by default."""
    return _xdg_dir("XDG_STATE_HOME", ".local/state") / "ublue-it"


class RebaseDefaults(BaseModel):
    """Defaults for the rebase selection flags."""

    model_config = ConfigDict(extra="forbid")

    desktop_env: str = DEFAULT_DESKTOP.value
    has_nvidia: bool = False
    nvidia_vers: str = ""
    auto_reboot: bool = False

    @field_validator("nvidia_vers", mode="before")
    @classmethod
    def _driver_as_text(cls, value: object) -> object:
        # An unquoted `nvidia_vers: 525` loads as an int.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class Config(BaseModel):
    """Validated ublue-it configuration."""

    model_config = ConfigDict(extra="forbid")

    defaults: RebaseDefaults = Field(default_factory=RebaseDefaults)
    release_file: Path = FEDORA_RELEASE_FILE
    state_dir: Path = Field(default_factory=default_state_dir)

    @property
    def audit_path(self) -> Path:
        return self.state_dir / "audit.ndjson"


def find_config_file() -> Path | None:
    """Locate the configuration file, if any.

    Returns:
        Path to the first existing candidate, or None.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    candidates = [
        _xdg_dir("XDG_CONFIG_HOME", ".config") / "ublue-it" / CONFIG_FILE,
        SYSTEM_CONFIG_PATH,
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None) -> Config:
    """Load and validate configuration.

    Args:
        path: Explicit config path. If None, searches the default
            locations and falls back to built-in defaults.

    Returns:
        Validated Config model.

    Raises:
        ConfigError: If the file is missing (when given explicitly) or invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No config file found — using defaults")
            return Config()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Config()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded config from %s", path)
    return config
