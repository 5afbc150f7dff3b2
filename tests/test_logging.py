"""Tests for logging helpers."""

import structlog
from structlog.testing import capture_logs

from nfsbroker.logging import get_logger, log_context, store_logger


def test_log_context_binds_and_restores() -> None:
    with log_context(binding_id="binding_123"):
        assert structlog.contextvars.get_contextvars()["binding_id"] == "binding_123"
        with log_context(binding_id="nested"):
            assert structlog.contextvars.get_contextvars()["binding_id"] == "nested"
        assert structlog.contextvars.get_contextvars()["binding_id"] == "binding_123"

    assert "binding_id" not in structlog.contextvars.get_contextvars()


def test_store_logger_binds_session() -> None:
    with capture_logs() as logs:
        store_logger("restore-state").info("start")

    assert logs == [{"event": "start", "session": "restore-state", "log_level": "info"}]


def test_store_logger_nests_under_caller_logger() -> None:
    with capture_logs() as logs:
        parent = get_logger("broker").bind(request_id="req-1")
        store_logger("serialize-state", parent).info("end")

    assert logs[0]["request_id"] == "req-1"
    assert logs[0]["session"] == "serialize-state"
