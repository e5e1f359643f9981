"""Tests for settings and logging configuration."""

import io
import json
import logging

import pytest
import structlog
from pydantic import ValidationError

from fsmachine import FSMachine
from fsmachine.core import config as config_module
from fsmachine.core.config import Settings
from fsmachine.core.logging_config import LIBRARY_LOGGER, configure_logging, get_log_level


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in ("FSM_ENVIRONMENT", "FSM_LOG_LEVEL", "FSM_TRIGGER_TIMEOUT_SECONDS"):
            monkeypatch.delenv(var, raising=False)
        config = Settings(_env_file=None)

        assert config.environment == "development"
        assert config.trigger_timeout_seconds is None
        assert config.validate_payloads is True
        assert config.login_flow_delay_seconds == 2.0

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("FSM_TRIGGER_TIMEOUT_SECONDS", "1.5")
        monkeypatch.setenv("FSM_LOG_LEVEL", "warning")
        config = Settings(_env_file=None)

        assert config.trigger_timeout_seconds == 1.5
        assert config.log_level == "WARNING"

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, trigger_timeout_seconds=0)

    def test_machine_uses_settings_timeout(self, monkeypatch, states_triggers):
        monkeypatch.setattr(config_module.settings, "trigger_timeout_seconds", 3.0)
        machine = FSMachine("credentials", None, states_triggers)
        assert machine.trigger_timeout == 3.0

    def test_explicit_timeout_overrides_settings(self, monkeypatch, states_triggers):
        monkeypatch.setattr(config_module.settings, "trigger_timeout_seconds", 3.0)
        machine = FSMachine("credentials", None, states_triggers, trigger_timeout=None)
        assert machine.trigger_timeout is None


class TestLoggingConfig:
    def test_explicit_level_wins(self):
        assert get_log_level(Settings(_env_file=None, log_level="error")) == "ERROR"

    @pytest.mark.parametrize(
        "environment,expected",
        [("production", "INFO"), ("development", "DEBUG"), ("test", "WARNING"), ("other", "INFO")],
    )
    def test_environment_defaults(self, environment, expected):
        config = Settings(_env_file=None, environment=environment, log_level="")
        assert get_log_level(config) == expected

    def test_configure_logging_routes_library_logger(self):
        library_logger = logging.getLogger(LIBRARY_LOGGER)
        previous = (library_logger.handlers[:], library_logger.level, library_logger.propagate)
        stream = io.StringIO()
        structlog.reset_defaults()
        try:
            configured = configure_logging(
                Settings(_env_file=None, environment="production", log_level=""), stream=stream
            )
            structlog.get_logger("fsmachine.tests").info("sample_event", state="welcome")

            assert configured is library_logger
            assert library_logger.level == logging.INFO
            assert library_logger.propagate is False
            record = json.loads(stream.getvalue().strip().splitlines()[-1])
            assert record["event"] == "sample_event"
            assert record["state"] == "welcome"
            assert record["level"] == "info"
        finally:
            library_logger.handlers, library_logger.level, library_logger.propagate = previous
            structlog.reset_defaults()

    def test_configure_logging_keeps_host_structlog_setup(self):
        library_logger = logging.getLogger(LIBRARY_LOGGER)
        previous = (library_logger.handlers[:], library_logger.level, library_logger.propagate)
        host_processors = [structlog.processors.KeyValueRenderer()]
        try:
            structlog.configure(processors=host_processors)
            configure_logging(Settings(_env_file=None, environment="production", log_level=""), stream=io.StringIO())

            assert structlog.get_config()["processors"] == host_processors
            assert len(library_logger.handlers) == 1
        finally:
            library_logger.handlers, library_logger.level, library_logger.propagate = previous
            structlog.reset_defaults()
