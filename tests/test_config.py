"""Tests for finmaster.config."""

import stat
from pathlib import Path

from finmaster.config import (
    Settings,
    create_default_config,
    get_config_path,
    load_config,
    load_settings,
    save_config,
    settings_from_config,
)
from finmaster.domain.aggregation import BalanceMode


class TestConfigFile:
    """Tests for reading and writing the config file."""

    def test_default_path_is_xdg(self, tmp_path: Path, monkeypatch) -> None:
        """Should honour XDG_CONFIG_HOME."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "finmaster" / "config.toml"

    def test_create_default_config(self, tmp_path: Path) -> None:
        """Should write defaults with 0600 permissions."""
        config_path = tmp_path / "finmaster" / "config.toml"
        create_default_config(config_path)

        assert load_config(config_path) == {
            "categorized_expenses": True,
            "balance_mode": "income",
            "storage_key": "finance_app_data",
            "log_level": "WARNING",
        }
        assert stat.S_IMODE(config_path.stat().st_mode) == 0o600

    def test_save_round_trip(self, tmp_path: Path) -> None:
        """Should read back what was saved."""
        config_path = tmp_path / "config.toml"
        save_config({"categorized_expenses": False}, config_path)
        assert load_config(config_path) == {"categorized_expenses": False}


class TestSettings:
    """Tests for settings_from_config and load_settings."""

    def test_defaults(self) -> None:
        """Should fill every missing key."""
        assert settings_from_config({}, environ={}) == Settings()

    def test_overrides(self) -> None:
        """Should apply config values."""
        settings = settings_from_config(
            {"categorized_expenses": False, "balance_mode": "next_salary", "storage_key": "x"}, environ={}
        )
        assert settings.categorized_expenses is False
        assert settings.balance_mode is BalanceMode.NEXT_SALARY
        assert settings.storage_key == "x"

    def test_unknown_balance_mode_falls_back(self) -> None:
        """Should use the income balance for unknown modes."""
        assert settings_from_config({"balance_mode": "weird"}, environ={}).balance_mode is BalanceMode.INCOME

    def test_env_overrides_log_level(self) -> None:
        """Should let FINMASTER_LOG_LEVEL win over the file."""
        settings = settings_from_config({"log_level": "ERROR"}, environ={"FINMASTER_LOG_LEVEL": "debug"})
        assert settings.log_level == "DEBUG"

    def test_missing_file_means_defaults(self, tmp_path: Path, monkeypatch) -> None:
        """Should not require a config file."""
        monkeypatch.delenv("FINMASTER_LOG_LEVEL", raising=False)
        assert load_settings(tmp_path / "missing.toml") == Settings()

    def test_malformed_file_means_defaults(self, tmp_path: Path, monkeypatch) -> None:
        """Should ignore a config file that isn't valid TOML."""
        monkeypatch.delenv("FINMASTER_LOG_LEVEL", raising=False)
        config_path = tmp_path / "config.toml"
        config_path.write_text("this is = = not toml", encoding="utf-8")
        assert load_settings(config_path) == Settings()
