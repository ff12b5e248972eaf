"""
Tests for settings, logging and the command-line runner

Run with: pytest -q
"""
import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from pricing_fetcher import __main__ as runner
from pricing_fetcher.config import (
    ColoredFormatter,
    ConfigError,
    JSONFormatter,
    Settings,
    get_logger,
    setup_logging,
)
from pricing_fetcher.schedule import days_of_the_week, hours_of_the_day


@pytest.fixture(autouse=True)
def restore_package_logger():
    logger = logging.getLogger("pricing_fetcher")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.fetcher.url is None
        assert settings.fetcher.directory == Path("data/prices")
        assert settings.fetcher.schedule == "always"
        assert settings.fetcher.max_retries == 3
        assert settings.logging.level == "INFO"
        assert settings.logging.json_logs is False

    def test_from_env(self):
        settings = Settings.from_env({
            "PRICING_FETCHER_URL": "https://prices.example.com/p.csv",
            "PRICING_FETCHER_DIRECTORY": "/tmp/prices",
            "PRICING_FETCHER_SCHEDULE": "hours(6)",
            "PRICING_FETCHER_TIMEOUT_SECONDS": "2.5",
            "PRICING_FETCHER_MAX_RETRIES": "0",
            "PRICING_FETCHER_LOG_LEVEL": "debug",
            "PRICING_FETCHER_JSON_LOGS": "true",
        })

        assert settings.require_url() == "https://prices.example.com/p.csv"
        assert settings.fetcher.directory == Path("/tmp/prices")
        assert settings.fetcher.schedule == "hours(6)"
        assert settings.fetcher.timeout_seconds == 2.5
        assert settings.fetcher.max_retries == 0
        assert settings.logging.level == "DEBUG"
        assert settings.logging.json_logs is True

    @pytest.mark.parametrize("name, value", [
        ("MAX_RETRIES", "three"),
        ("MAX_RETRIES", "-1"),
        ("TIMEOUT_SECONDS", "soon"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, name, value):
        with pytest.raises(ConfigError) as exc:
            Settings.from_env({f"PRICING_FETCHER_{name}": value})
        assert name in str(exc.value)

    def test_require_url_missing(self):
        with pytest.raises(ConfigError):
            Settings.from_env({}).require_url()


class TestLogging:

    def test_setup_json(self):
        logger = setup_logging("WARNING", json_logs=True)

        assert logger.name == "pricing_fetcher"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_setup_console_and_file(self, tmp_path):
        log_file = tmp_path / "logs" / "fetcher.log"
        logger = setup_logging("INFO", log_file=str(log_file))

        assert isinstance(logger.handlers[0].formatter, ColoredFormatter)
        assert log_file.parent.is_dir()
        for handler in logger.handlers[1:]:
            handler.close()

    def test_json_formatter_includes_extra_data(self):
        record = logging.LogRecord("pricing_fetcher.test", logging.INFO, __file__, 1,
                                   "fetched %s", ("prices.csv",), None)
        record.extra_data = {"status_code": 200}

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "fetched prices.csv"
        assert data["level"] == "INFO"
        assert data["data"] == {"status_code": 200}

    def test_colored_formatter_leaves_record_untouched(self):
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", (), None)
        ColoredFormatter("%(levelname)s %(message)s").format(record)
        assert record.levelname == "ERROR"

    def test_file_receives_debug_records(self, tmp_path):
        log_file = tmp_path / "fetcher.log"
        logger = setup_logging("WARNING", log_file=str(log_file))

        get_logger("fetcher").debug("not due", extra={"extra_data": {"minute": 5}})
        for handler in logger.handlers:
            handler.flush()
        for handler in logger.handlers[1:]:
            handler.close()

        line = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert line["message"] == "not due"
        assert line["level"] == "DEBUG"
        assert line["data"] == {"minute": 5}
        assert logger.handlers[0].level == logging.WARNING

    def test_json_timestamp_is_record_creation_time(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "tick", (), None)
        record.created = 0.0

        data = json.loads(JSONFormatter().format(record))

        assert data["timestamp"] == "1970-01-01T00:00:00+00:00"
        assert "data" not in data

    def test_colored_formatter_appends_context(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "fetched", (), None)
        record.extra_data = {"status_code": 200, "attempt": 1}

        line = ColoredFormatter("%(message)s").format(record)

        assert line == "fetched | status_code=200 attempt=1"

    def test_get_logger_attaches_context(self):
        adapter = get_logger("fetcher", url="https://prices.example.com")
        msg, kwargs = adapter.process("hello", {"extra": {"extra_data": {"attempt": 2}}})

        assert adapter.logger.name == "pricing_fetcher.fetcher"
        assert kwargs["extra"]["extra_data"] == {"url": "https://prices.example.com", "attempt": 2}


class TestRunner:

    @pytest.fixture(autouse=True)
    def no_dotenv(self):
        with patch.object(runner, "load_dotenv"):
            yield

    def test_main_starts_fetch(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PRICING_FETCHER_URL", "https://prices.example.com/p.csv")
        monkeypatch.setenv("PRICING_FETCHER_DIRECTORY", str(tmp_path))
        monkeypatch.setenv("PRICING_FETCHER_SCHEDULE", "days(wed) and hours(6)")

        with patch.object(runner, "fetch") as fetch, patch.object(runner.signal, "signal"):
            assert runner.main() == 0

        args, kwargs = fetch.call_args
        assert args[0] == tmp_path
        assert args[1] == "https://prices.example.com/p.csv"
        assert args[2] == days_of_the_week("wed") & hours_of_the_day(6)

    def test_main_rejects_missing_url(self, monkeypatch, capsys):
        monkeypatch.delenv("PRICING_FETCHER_URL", raising=False)

        with patch.object(runner, "fetch") as fetch:
            assert runner.main() == 2

        fetch.assert_not_called()
        assert "PRICING_FETCHER_URL" in capsys.readouterr().err

    def test_main_rejects_bad_schedule(self, monkeypatch, capsys):
        monkeypatch.setenv("PRICING_FETCHER_URL", "https://prices.example.com/p.csv")
        monkeypatch.setenv("PRICING_FETCHER_SCHEDULE", "hours(99)")

        with patch.object(runner, "fetch") as fetch:
            assert runner.main() == 2

        fetch.assert_not_called()
        assert "out of range" in capsys.readouterr().err
