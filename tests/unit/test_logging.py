"""
Unit Tests - Logging Configuration
"""
import io
import json
import logging

import pytest
import structlog

from storefront.config import Settings
from storefront.config import logging as logging_config
from storefront.config.logging import SERVER_LOGGERS, build_renderer, configure_logging
from storefront.config.settings import DatabaseSettings


@pytest.fixture(autouse=True)
def restore_logging():
    """Put the root logger and structlog back the way the test found them."""
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    engine_level = logging.getLogger("sqlalchemy.engine").level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(engine_level)
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging"""

    def test_json_lines(self):
        stream = io.StringIO()
        configure_logging("INFO", "json", stream=stream)

        structlog.get_logger("storefront.jobs").info("Catalog import completed", products=3)

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "Catalog import completed"
        assert record["logger"] == "storefront.jobs"
        assert record["level"] == "info"
        assert record["products"] == 3
        assert "timestamp" in record

    def test_stdlib_records_share_the_stream(self):
        stream = io.StringIO()
        configure_logging("INFO", "json", stream=stream)

        logging.getLogger("uvicorn.error").warning("Server shutting down")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "Server shutting down"
        assert record["logger"] == "uvicorn.error"

    def test_level_filters_events(self):
        stream = io.StringIO()
        configure_logging("WARNING", "json", stream=stream)

        structlog.get_logger("storefront.jobs").info("Producers upserted", count=2)

        assert stream.getvalue() == ""

    def test_server_loggers_propagate(self):
        configure_logging("INFO", "json", stream=io.StringIO())

        for name in SERVER_LOGGERS:
            server_logger = logging.getLogger(name)
            assert server_logger.propagate is True
            assert server_logger.handlers == []

    @pytest.mark.parametrize("echo,expected", [(False, logging.WARNING), (True, logging.INFO)])
    def test_sql_echo_level(self, monkeypatch, echo, expected):
        settings = Settings(APP_ENV="testing", database=DatabaseSettings(echo=echo))
        monkeypatch.setattr(logging_config, "get_settings", lambda: settings)

        configure_logging("INFO", "json", stream=io.StringIO())

        assert logging.getLogger("sqlalchemy.engine").level == expected

    def test_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD", "json", stream=io.StringIO())

    def test_rejects_unknown_format(self):
        with pytest.raises(ValueError):
            configure_logging("INFO", "xml", stream=io.StringIO())


class TestBuildRenderer:
    """Tests for build_renderer"""

    def test_json(self):
        assert isinstance(build_renderer("json"), structlog.processors.JSONRenderer)

    def test_text(self):
        assert isinstance(build_renderer("text"), structlog.dev.ConsoleRenderer)
