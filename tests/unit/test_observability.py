"""Unit tests for structured logging utilities in ``observability``."""

from __future__ import annotations

import logging

import pytest

from lib_relaxed_config import bind_trace_id, get_logger
from lib_relaxed_config.observability import TRACE_ID, log_info, log_warning, make_event


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to stay quiet by default."""

    logger = get_logger()
    assert logger.name == "lib_relaxed_config"
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_relaxed_config")
    bind_trace_id("trace-123")
    try:
        log_info("configuration_bootstrapped", source=None, key=None)
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "source": None, "key": None}


def test_log_warning_uses_warning_level(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_relaxed_config")
    log_warning("source_failed", **make_event("broken", "server.port"))
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "source_failed"
    assert record.context["source"] == "broken"


def test_bind_trace_id_clears_context() -> None:
    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    """make_event should merge optional metadata without dropping base keys."""

    event = make_event("environment", None, {"keys": 3})
    assert event == {"source": "environment", "key": None, "keys": 3}
