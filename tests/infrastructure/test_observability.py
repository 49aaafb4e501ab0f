"""Structured Logging — JSON formatter fields and setup_logging switches.

Tests cover:
    - JSON lines include base fields and known extras only when present
    - setup_logging attaches one handler and honours level
    - enabled=False silences the jsdb hierarchy
"""

import json
import logging

import pytest

from jsdb.infrastructure.observability import JSONFormatter, setup_logging


@pytest.fixture
def jsdb_logger():
    logger = logging.getLogger("jsdb")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def _record(**extra):
    record = logging.LogRecord(
        "jsdb.services.dispatch_command", logging.INFO, __file__, 1,
        "select on items", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_base_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "jsdb.services.dispatch_command"
    assert payload["message"] == "select on items"
    assert "table" not in payload


def test_json_formatter_includes_extras():
    payload = json.loads(JSONFormatter().format(_record(table="items", lock_age=12.5)))
    assert payload["table"] == "items"
    assert payload["lock_age"] == 12.5


def test_setup_logging_json(jsdb_logger):
    setup_logging("DEBUG", "json")
    assert len(jsdb_logger.handlers) == 1
    assert isinstance(jsdb_logger.handlers[0].formatter, JSONFormatter)
    assert jsdb_logger.level == logging.DEBUG


def test_setup_logging_is_idempotent(jsdb_logger):
    setup_logging("INFO", "text")
    setup_logging("INFO", "text")
    assert len(jsdb_logger.handlers) == 1
    assert not isinstance(jsdb_logger.handlers[0].formatter, JSONFormatter)


def test_setup_logging_disabled_silences_children(jsdb_logger):
    setup_logging(enabled=False)
    child = logging.getLogger("jsdb.infrastructure.document_store")
    assert not child.isEnabledFor(logging.CRITICAL)
