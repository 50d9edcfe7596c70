"""Tests for settings and logging configuration."""

import logging

from filter_engine.config.logging_config import get_logger, setup_logging
from filter_engine.config.settings import Config, DisplayConfig, SearchConfig, config


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in [
            "FILTER_ENGINE_SEARCH_FIELDS",
            "FILTER_ENGINE_LABEL_MAX_LENGTH",
            "FILTER_ENGINE_NULL_OPTION_ID",
        ]:
            monkeypatch.delenv(name, raising=False)

        settings = Config()

        assert settings.search.fields == ("label", "value", "category")
        assert settings.display.label_max_length == 15
        assert settings.null_option.id == "none"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FILTER_ENGINE_SEARCH_FIELDS", " name, status ,,")
        monkeypatch.setenv("FILTER_ENGINE_MAX_SELECTED_LABELS", "3")

        assert SearchConfig().fields == ("name", "status")
        assert DisplayConfig().max_selected_labels == 3


class TestLogging:
    """Tests for logger setup."""

    def test_get_logger_prefix(self):
        assert get_logger().name == "filter_engine"
        assert get_logger("state").name == "filter_engine.state"

    def test_setup_logging_to_file(self, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"

        logger = setup_logging("DEBUG", log_file=log_file, log_to_console=False)
        get_logger("state").debug("hello")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert "filter_engine.state | hello" in log_file.read_text()

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_setup_logging_uses_configured_level(self, monkeypatch):
        monkeypatch.setattr(config.app, "log_level", "warning")

        logger = setup_logging(log_to_console=False)

        assert logger.level == logging.WARNING
        assert setup_logging("ERROR", log_to_console=False).level == logging.ERROR

        logger.setLevel(logging.NOTSET)
