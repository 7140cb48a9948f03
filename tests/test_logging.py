"""Tests for structured logging setup"""

import io
import json
import logging

import pytest
import structlog

from auditor.core.config import Settings
from auditor.infrastructure.logging import get_logger, setup_logging
from auditor.infrastructure.logging_processors import (REDACTED, ServiceContext,
                                                       format_exception_info,
                                                       sanitize_sensitive_data,
                                                       set_log_severity)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


class TestProcessors:
    def test_service_context(self):
        event = ServiceContext("billing", "staging")(None, "info", {"event": "x"})
        assert event["service"] == "billing"
        assert event["environment"] == "staging"

    def test_sensitive_keys_redacted(self):
        event = sanitize_sensitive_data(
            None, "info",
            {
                "event": "audit_remote_delivery_failed",
                "headers": {"Authorization": "Bearer abc", "Accept": "json"},
                "remote_token": "abc",
                "items": [{"password": "p"}],
            },
        )
        assert event["headers"] == {"Authorization": REDACTED, "Accept": "json"}
        assert event["remote_token"] == REDACTED
        assert event["items"] == [{"password": REDACTED}]

    @pytest.mark.parametrize(
        "level,severity", [("info", "INFO"), ("warning", "WARNING"), ("trace", "INFO")]
    )
    def test_severity(self, level, severity):
        assert set_log_severity(None, level, {"level": level})["severity"] == severity

    def test_exception_formatted(self):
        try:
            raise ValueError("bad value")
        except ValueError as e:
            event = format_exception_info(None, "error", {"exc_info": e})

        assert event["exception"]["type"] == "ValueError"
        assert event["exception"]["message"] == "bad value"
        assert "exc_info" not in event


class TestSetupLogging:
    def test_json_output(self, capsys):
        setup_logging(Settings(_env_file=None, log_format="json", app_name="audit-test"))

        get_logger("auditor").warning("audit_file_size_limit_reached", file_name="audit.log")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "audit_file_size_limit_reached"
        assert entry["service"] == "audit-test"
        assert entry["severity"] == "WARNING"
        assert entry["file_name"] == "audit.log"

    def test_level_applied(self):
        setup_logging(Settings(_env_file=None, log_level="ERROR"))
        assert logging.getLogger().level == logging.ERROR

    def test_http_client_loggers_quieted(self):
        setup_logging(Settings(_env_file=None, log_level="DEBUG"))
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_console_record_in_event(self):
        stream = io.StringIO()
        setup_logging(Settings(_env_file=None, log_format="json"), stream=stream)

        get_logger("auditor").info({"type": "auth", "action": "login", "message": "m"})

        entry = json.loads(stream.getvalue().splitlines()[-1])
        assert entry["event"] == {"type": "auth", "action": "login", "message": "m"}

    def test_captured_by_structlog_testing(self):
        with structlog.testing.capture_logs() as logs:
            get_logger("auditor").info("audit_setup_complete", split_files=False)

        assert logs == [
            {"event": "audit_setup_complete", "split_files": False, "log_level": "info"}
        ]
