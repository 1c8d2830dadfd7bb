"""Unit tests for structured logging infrastructure.

- StructuredFormatter produces valid JSON with required fields
- Extras merged into context, sensitive keys redacted
- configure_logging() level/format selection and idempotency
"""

import json
import logging
import sys

import pytest

from jira_import.logging_config import (
    LOGGER_NAMESPACE,
    StructuredFormatter,
    TextFormatter,
    configure_logging,
)


def _record(msg: str = "test_message", name: str = "jira_import.test") -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def namespace_logger():
    """Restore the jira_import logger after each test."""
    logger = logging.getLogger(LOGGER_NAMESPACE)
    saved = (logger.level, list(logger.handlers), logger.propagate)
    logger.handlers.clear()
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


class TestStructuredFormatter:
    def test_formatter_includes_required_fields(self):
        log_data = json.loads(StructuredFormatter().format(_record("jira_search_page")))

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "jira_import.test"
        assert log_data["message"] == "jira_search_page"
        assert log_data["timestamp"].endswith("Z")
        assert "T" in log_data["timestamp"]

    def test_no_context_without_extras(self):
        log_data = json.loads(StructuredFormatter().format(_record()))
        assert "context" not in log_data

    def test_extras_merged_into_context(self):
        record = _record("jira_search_page")
        record.start_at = 100
        record.page_issues = 100

        log_data = json.loads(StructuredFormatter().format(record))

        assert log_data["context"] == {"start_at": 100, "page_issues": 100}

    def test_sensitive_keys_redacted(self):
        record = _record()
        record.api_token = "abc123"
        record.Authorization = "Basic xyz"
        record.status_code = 401

        context = json.loads(StructuredFormatter().format(record))["context"]

        assert context["api_token"] == "[REDACTED]"
        assert context["Authorization"] == "[REDACTED]"
        assert context["status_code"] == 401

    def test_non_serialisable_extras_stringified(self):
        record = _record()
        record.path = object()
        context = json.loads(StructuredFormatter().format(record))["context"]
        assert isinstance(context["path"], str)

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                name="jira_import.test",
                level=logging.ERROR,
                pathname="test.py",
                lineno=1,
                msg="failed",
                args=(),
                exc_info=sys.exc_info(),
            )

        log_data = json.loads(StructuredFormatter().format(record))
        assert "ValueError: boom" in log_data["exception"]


class TestConfigureLogging:
    def test_level_argument(self, namespace_logger):
        logger = configure_logging("DEBUG")
        assert logger is namespace_logger
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_level_from_environment(self, namespace_logger, monkeypatch):
        monkeypatch.setenv("JIRA_IMPORT_LOG_LEVEL", "ERROR")
        assert configure_logging().level == logging.ERROR

    def test_default_level_warning(self, namespace_logger, monkeypatch):
        monkeypatch.delenv("JIRA_IMPORT_LOG_LEVEL", raising=False)
        assert configure_logging().level == logging.WARNING

    def test_json_format_default(self, namespace_logger, monkeypatch):
        monkeypatch.delenv("JIRA_IMPORT_LOG_FORMAT", raising=False)
        logger = configure_logging("INFO")
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_text_format(self, namespace_logger):
        logger = configure_logging("INFO", "text")
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_idempotent_handlers(self, namespace_logger):
        configure_logging("INFO", "json")
        logger = configure_logging("DEBUG", "text")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_child_loggers_emit_json(self, namespace_logger, capsys):
        configure_logging("INFO", "json")
        logging.getLogger("jira_import.client").info(
            "jira_search_complete", extra={"total_issues": 3}
        )

        line = capsys.readouterr().err.strip().splitlines()[-1]
        log_data = json.loads(line)
        assert log_data["logger"] == "jira_import.client"
        assert log_data["context"] == {"total_issues": 3}
