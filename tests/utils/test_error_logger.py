"""Tests for structured error logging helpers."""

import logging

import httpx

from linkvault.utils.error_logger import log_error, log_http_error, log_processing_error


def test_log_error_attaches_context(caplog):
    with caplog.at_level(logging.WARNING):
        log_error(
            "enrichment_pipeline",
            RuntimeError("xp service down"),
            operation="award_save_xp",
            item_id=12,
            context={"user_id": "user-1"},
            level=logging.WARNING,
        )

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.name == "error.enrichment_pipeline"
    assert record.getMessage() == (
        "enrichment_pipeline error during award_save_xp (item: 12): xp service down"
    )
    assert record.component == "enrichment_pipeline"
    assert record.context_data == {"user_id": "user-1"}
    assert record.error_type == "RuntimeError"


def test_log_processing_error_defaults_operation(caplog):
    with caplog.at_level(logging.ERROR):
        log_processing_error("enrichment_pipeline", 3, ValueError("bad summary"))

    record = caplog.records[-1]
    assert record.levelno == logging.ERROR
    assert record.operation == "content_processing"
    assert record.item_id == 3


def test_log_http_error_records_response_details(caplog):
    request = httpx.Request("GET", "https://example.com/page")
    response = httpx.Response(503, text="upstream busy", request=request)

    with caplog.at_level(logging.ERROR):
        log_http_error("http_service", url="https://example.com/page", response=response)

    record = caplog.records[-1]
    assert record.context_data == {"url": "https://example.com/page"}
    assert record.http_details["status_code"] == 503
    assert record.http_details["response_body"] == "upstream busy"
    assert "status: 503" in record.error_message
