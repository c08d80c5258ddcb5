"""Tests for application settings."""

import logging
from collections.abc import Iterator

import pytest
from strategy_lab.config import Settings, configure_logging, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("MAX_INSTRUMENTS", "MAX_CONCURRENCY", "LOG_LEVEL", "BARS_CSV_PATH"):
            monkeypatch.delenv(f"STRATEGY_LAB_{name}", raising=False)

        settings = Settings(_env_file=None)

        assert settings.max_instruments == 50
        assert settings.max_concurrency == 8
        assert settings.log_level == "INFO"
        assert settings.bars_csv_path == "data/bars.csv"

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRATEGY_LAB_MAX_INSTRUMENTS", "3")
        monkeypatch.setenv("STRATEGY_LAB_LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.max_instruments == 3
        assert settings.log_level == "debug"

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestConfigureLogging:
    """Tests for logging setup."""

    def test_level_and_format_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        configure_logging(Settings(log_level="debug"))

        assert len(calls) == 1
        assert calls[0]["level"] == "DEBUG"
        assert calls[0]["format"] == "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
