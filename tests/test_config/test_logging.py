"""Testes de config.logging.

Cobre: configure_logging, log_fallback, CorrelationIdFilter e o formato JSON.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_fallback,
)
from config.logging.config import DEFAULT_SERVICE_NAME, NOISY_LOGGERS, VALID_LOG_LEVELS


def _record(msg: str = "msg", name: str = "test") -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_default_level_is_info(self) -> None:
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_level_is_case_insensitive(self) -> None:
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")

    def test_replaces_existing_handlers(self) -> None:
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1
        assert any(isinstance(f, CorrelationIdFilter) for f in root.handlers[0].filters)

    def test_noisy_loggers_lowered_outside_debug(self) -> None:
        configure_logging(level="INFO")
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_constants(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS
        assert DEFAULT_SERVICE_NAME == "asistente_citas"

    def test_get_logger_same_name_returns_same_instance(self) -> None:
        assert get_logger("same.module") is get_logger("same.module")


class TestLogFallback:
    """Testes para log_fallback."""

    def test_basic(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "response_generation")
        call_args = logger.info.call_args
        assert call_args[0] == ("Fallback applied for %s", "response_generation")
        extra = call_args[1]["extra"]
        assert extra == {"fallback_used": True, "component": "response_generation"}

    def test_reason_and_elapsed_are_rounded(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "response_generation", reason="rate_limited", elapsed_ms=12.3456)
        extra = logger.info.call_args[1]["extra"]
        assert extra["reason"] == "rate_limited"
        assert extra["elapsed_ms"] == 12.35


class TestCorrelationIdFilter:
    """Testes para CorrelationIdFilter."""

    def test_adds_correlation_id_from_getter(self) -> None:
        filter_ = CorrelationIdFilter("my_service", lambda: "corr-123")
        record = _record()
        assert filter_.filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.service == "my_service"

    def test_preserves_explicit_correlation_id(self) -> None:
        filter_ = CorrelationIdFilter("svc", lambda: "from-getter")
        record = _record()
        record.correlation_id = "explicit-id"
        filter_.filter(record)
        assert record.correlation_id == "explicit-id"

    def test_empty_string_without_getter(self) -> None:
        filter_ = CorrelationIdFilter("service_name", None)
        record = _record()
        filter_.filter(record)
        assert record.correlation_id == ""


class TestJsonFormatter:
    """Formato de saída dos logs."""

    def test_rename_map(self) -> None:
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}
        assert "correlation_id" in REQUIRED_LOG_FIELDS

    def test_output_is_json_with_required_fields_and_extra(self) -> None:
        formatter = create_json_formatter()
        record = _record("delivery_succeeded", name="app.services.outbound_delivery")
        record.correlation_id = "abc-123"
        record.service = "asistente_citas"
        record.attempts = 2

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "delivery_succeeded"
        assert payload["logger"] == "app.services.outbound_delivery"
        assert payload["level"] == "INFO"
        assert payload["correlation_id"] == "abc-123"
        assert payload["service"] == "asistente_citas"
        assert payload["attempts"] == 2
