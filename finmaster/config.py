"""Configuration file management for finmaster."""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from finmaster.domain.aggregation import BalanceMode
from finmaster.store.record_store import DEFAULT_STORAGE_KEY

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "FINMASTER_LOG_LEVEL"

DEFAULT_CONFIG: dict[str, Any] = {
    "categorized_expenses": True,
    "balance_mode": BalanceMode.INCOME.value,
    "storage_key": DEFAULT_STORAGE_KEY,
    "log_level": "WARNING",
}


@dataclass(frozen=True)
class Settings:
    """Effective settings after defaults and environment overrides."""

    categorized_expenses: bool = True
    balance_mode: BalanceMode = BalanceMode.INCOME
    storage_key: str = DEFAULT_STORAGE_KEY
    log_level: str = "WARNING"


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "finmaster" / "config.toml"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    save_config(dict(DEFAULT_CONFIG), config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def _parse_balance_mode(value: Any) -> BalanceMode:
    try:
        return BalanceMode(str(value).lower())
    except ValueError:
        logger.warning("Unknown balance_mode %r in config, using '%s'", value, BalanceMode.INCOME.value)
        return BalanceMode.INCOME


def settings_from_config(config: dict[str, Any], environ: dict[str, str] | None = None) -> Settings:
    """Merge a config dictionary over the defaults.

    Args:
        config: Parsed config file (may be empty or partial).
        environ: Environment mapping. If None, uses os.environ.

    Returns:
        Settings with FINMASTER_LOG_LEVEL applied last.
    """
    if environ is None:
        environ = dict(os.environ)

    merged = {**DEFAULT_CONFIG, **config}
    log_level = environ.get(LOG_LEVEL_ENV) or merged["log_level"]

    return Settings(
        categorized_expenses=bool(merged["categorized_expenses"]),
        balance_mode=_parse_balance_mode(merged["balance_mode"]),
        storage_key=str(merged["storage_key"]) or DEFAULT_STORAGE_KEY,
        log_level=str(log_level).upper(),
    )


def load_settings(config_path: Path | None = None) -> Settings:
    """Load effective settings. A missing or unreadable config file means defaults.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Settings.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = {}
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring malformed config file: %s", e)
        config = {}
    return settings_from_config(config)
