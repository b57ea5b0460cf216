"""Tests for settings and logging setup."""

import logging

import pytest
import structlog

from acpc.config import Settings, configure_logging


@pytest.fixture(autouse=True)
def restore_structlog():
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ACPC_LOG_LEVEL", raising=False)
        monkeypatch.delenv("ACPC_LOG_FORMAT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.log_format == "plain"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("ACPC_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ACPC_LOG_FORMAT", "json")
        settings = Settings(_env_file=None)
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"


class TestConfigureLogging:
    """Test structlog configuration."""

    def test_sets_root_level(self):
        settings = configure_logging(Settings(_env_file=None, log_level="debug"))
        assert settings.log_level == "debug"
        assert logging.getLogger().level == logging.DEBUG

    def test_json_output(self, capsys):
        configure_logging(Settings(_env_file=None, log_level="INFO", log_format="json"))
        structlog.get_logger("acpc.test").info("center step", iteration=3)
        err = capsys.readouterr().err
        assert '"event": "center step"' in err
        assert '"iteration": 3' in err

    def test_level_filters_debug(self, capsys):
        configure_logging(Settings(_env_file=None, log_level="WARNING"))
        structlog.get_logger("acpc.test").debug("bisector search did not converge")
        assert "bisector" not in capsys.readouterr().err
