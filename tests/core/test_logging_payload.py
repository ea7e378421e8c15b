"""Tests for JSON log payloads and logging setup."""

import json
import logging
import os
import sys

import pytest

from linkvault.core.logging import build_log_payload, setup_logging


def _record(msg: str = "Processing error", level: int = logging.ERROR, exc_info=None):
    return logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="test_file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestBuildLogPayload:
    def test_basic_payload(self):
        payload = build_log_payload(_record("Test error message"), include_error=False)

        assert payload["level"] == "ERROR"
        assert payload["logger"] == "test.logger"
        assert payload["component"] == "test.logger"
        assert payload["message"] == "Test error message"
        assert payload["source_file"] == "test_file.py"
        assert payload["source_line"] == 42
        assert "timestamp" in payload
        assert "error_type" not in payload

    def test_exception_info(self):
        try:
            raise ValueError("Test exception")
        except ValueError:
            exc_info = sys.exc_info()

        payload = build_log_payload(_record(exc_info=exc_info), include_error=True)

        assert payload["error_type"] == "ValueError"
        assert payload["error_message"] == "Test exception"
        assert "ValueError: Test exception" in payload["stack_trace"]

    def test_structured_fields(self):
        record = _record()
        record.component = "enrichment_pipeline"
        record.operation = "summarizing"
        record.platform = "reddit"
        record.item_id = 123
        record.context_data = {"url": "https://reddit.com/r/python/"}

        payload = build_log_payload(record, include_error=False)

        assert payload["component"] == "enrichment_pipeline"
        assert payload["operation"] == "summarizing"
        assert payload["platform"] == "reddit"
        assert payload["item_id"] == 123
        assert payload["context_data"] == {"url": "https://reddit.com/r/python/"}

    def test_unstructured_extras_merged_into_context(self):
        record = _record()
        record.user_id = "user-1"
        record.context_data = {"item_id": 5}

        payload = build_log_payload(record, include_error=False)

        assert payload["context_data"] == {"user_id": "user-1", "item_id": 5}

    def test_secrets_redacted(self):
        record = _record("Auth failed with Bearer abc.def for https://x.io/a?api_key=k1&b=2")
        record.context_data = {"password": "secret123", "username": "jane"}
        record.http_details = {"headers": {"Authorization": "Bearer token123"}}

        payload = build_log_payload(record, include_error=False)

        assert "abc.def" not in payload["message"]
        assert "api_key=<redacted>&b=2" in payload["message"]
        assert payload["context_data"] == {"password": "<redacted>", "username": "jane"}
        assert payload["http_details"]["headers"]["Authorization"] == "<redacted>"


@pytest.fixture
def isolated_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    setup_logging.cache_clear()
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    setup_logging.cache_clear()


def test_setup_logging_writes_jsonl_files(isolated_root_logger, monkeypatch, tmp_path):
    monkeypatch.setenv("LINKVAULT_LOGS_DIR", str(tmp_path))

    logger = setup_logging("testapp", "INFO")
    logger.error("Extraction failed", extra={"component": "twitter_resolver"})
    logger.info("Enriched item", extra={"item_id": 7})
    logger.info("Plain message")
    for handler in isolated_root_logger.handlers:
        handler.flush()

    errors_file = tmp_path / "errors" / f"testapp_errors_{os.getpid()}.jsonl"
    structured_file = tmp_path / "structured" / f"testapp_structured_{os.getpid()}.jsonl"

    errors = [json.loads(line) for line in errors_file.read_text().splitlines()]
    assert [entry["message"] for entry in errors] == ["Extraction failed"]
    assert errors[0]["component"] == "twitter_resolver"
    assert errors[0]["error_type"] == "LogError"

    structured = [json.loads(line) for line in structured_file.read_text().splitlines()]
    assert [entry["message"] for entry in structured] == ["Enriched item"]
    assert structured[0]["item_id"] == 7


def test_setup_logging_console_only(isolated_root_logger, monkeypatch, tmp_path):
    monkeypatch.setenv("LINKVAULT_LOGS_DIR", str(tmp_path))

    setup_logging("testapp", "DEBUG", json_files=False)

    assert len(isolated_root_logger.handlers) == 1
    assert isolated_root_logger.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    assert not (tmp_path / "errors").exists()
