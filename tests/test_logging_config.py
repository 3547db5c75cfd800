# test_logging_config.py
# Unit tests for the JSON formatter and the per-request access line

# @see: isim_api/logging_config.py - Implementation under test

import json
import logging

import pytest

from isim_api.logging_config import (
    DevelopmentFormatter,
    StructuredFormatter,
    get_logger,
    log_request,
    setup_logging,
)


class _Collector(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def collector():
    setup_logging("DEBUG")
    handler = _Collector()
    root = get_logger()
    root.addHandler(handler)
    yield handler
    root.removeHandler(handler)


def test_structured_formatter_emits_json_with_request_fields():
    record = logging.LogRecord("isim.access", logging.INFO, __file__, 1, "GET /api/names -> 200", None, None)
    record.method = "GET"
    record.status = 200

    entry = json.loads(StructuredFormatter().format(record))

    assert entry["service"] == "isim-atlasi-api"
    assert entry["level"] == "INFO"
    assert entry["method"] == "GET"
    assert entry["status"] == 200
    assert "client" not in entry


def test_structured_formatter_keeps_turkish_characters():
    record = logging.LogRecord("isim", logging.INFO, __file__, 1, "Işıl eklendi", None, None)
    assert "Işıl" in StructuredFormatter().format(record)


def test_setup_logging_replaces_handlers():
    setup_logging("INFO")
    logger = setup_logging("WARNING", production=True)
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
    assert logger.level == logging.WARNING

    logger = setup_logging("INFO")
    assert isinstance(logger.handlers[0].formatter, DevelopmentFormatter)


def test_get_logger_returns_child():
    assert get_logger("cache").name == "isim.cache"
    assert get_logger().name == "isim"


def test_log_request_levels(collector):
    log_request("GET", "/api/names", 200, 3.456, "1.2.3.4")
    log_request("POST", "/api/generate", 500, 10.0)

    ok, failed = collector.records
    assert ok.levelno == logging.INFO
    assert ok.duration_ms == 3.5
    assert ok.client == "1.2.3.4"
    assert failed.levelno == logging.WARNING
    assert failed.path == "/api/generate"


def test_every_response_is_logged(client, collector):
    client.get("/health", headers={"X-Forwarded-For": "9.9.9.9"})

    access = [r for r in collector.records if r.name == "isim.access"]
    assert access[-1].path == "/health"
    assert access[-1].status == 200
    assert access[-1].client == "9.9.9.9"
