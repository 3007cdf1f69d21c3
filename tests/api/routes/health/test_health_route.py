"""Testes dos endpoints de health e readiness."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.requests import Request

from api.routes.health import router as health_router
from api.routes.health.router import health_check, readiness_check
from app.infra.stores.memory_stores import MemoryDedupeStore, MemoryExchangeStore


def _build_request_with_state(state: SimpleNamespace) -> Request:
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/ready",
        "raw_path": b"/ready",
        "query_string": b"",
        "headers": [],
        "app": SimpleNamespace(state=state),
    }

    async def _receive() -> dict[str, object]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, _receive)


def _services(*, exchange_store=None, dedupe=None, generation_enabled: bool = True) -> SimpleNamespace:
    return SimpleNamespace(
        exchange_store=exchange_store if exchange_store is not None else MemoryExchangeStore(),
        dedupe=dedupe if dedupe is not None else MemoryDedupeStore(),
        response_service=SimpleNamespace(enabled=generation_enabled),
        runner=SimpleNamespace(active_count=2),
    )


async def _ready(state: SimpleNamespace) -> tuple[int, dict]:
    response = await readiness_check(_build_request_with_state(state))
    return response.status_code, json.loads(response.body.decode("utf-8"))


@pytest.mark.asyncio
async def test_health_is_always_healthy() -> None:
    response = await health_check()

    assert response.status == "healthy"
    assert response.service == "asistente_citas"


@pytest.mark.asyncio
async def test_readiness_without_services_is_not_ready() -> None:
    status_code, payload = await _ready(SimpleNamespace())

    assert status_code == 503
    assert payload["status"] == "not_ready"
    assert payload["checks"] == {}


@pytest.mark.asyncio
async def test_readiness_with_memory_stores_is_ready() -> None:
    status_code, payload = await _ready(SimpleNamespace(services=_services()))

    assert status_code == 200
    assert payload["status"] == "ready"
    assert payload["checks"]["exchange_store"]["status"] == "ok"
    assert payload["checks"]["dedupe"]["status"] == "ok"
    assert payload["checks"]["generation"]["status"] == "ok"
    assert payload["background_tasks"] == 2


@pytest.mark.asyncio
async def test_readiness_reports_disabled_generation_as_degraded() -> None:
    status_code, payload = await _ready(
        SimpleNamespace(services=_services(generation_enabled=False))
    )

    assert status_code == 200
    assert payload["checks"]["generation"] == {
        "status": "degraded",
        "latency_ms": None,
        "error": "not_configured",
    }


@pytest.mark.asyncio
async def test_readiness_fails_when_store_ping_raises() -> None:
    dedupe = MagicMock()
    dedupe.ping = AsyncMock(side_effect=ConnectionError("redis down"))

    status_code, payload = await _ready(SimpleNamespace(services=_services(dedupe=dedupe)))

    assert status_code == 503
    assert payload["status"] == "not_ready"
    assert payload["checks"]["dedupe"]["status"] == "failed"
    assert payload["checks"]["dedupe"]["error"] == "ConnectionError"


@pytest.mark.asyncio
async def test_readiness_ping_ok_and_falsy() -> None:
    exchange_store = MagicMock()
    exchange_store.ping = AsyncMock(return_value=False)
    dedupe = MagicMock()
    dedupe.ping = AsyncMock(return_value=True)

    status_code, payload = await _ready(
        SimpleNamespace(services=_services(exchange_store=exchange_store, dedupe=dedupe))
    )

    assert status_code == 200
    assert payload["checks"]["exchange_store"]["status"] == "degraded"
    assert payload["checks"]["dedupe"]["status"] == "ok"
    assert payload["checks"]["dedupe"]["latency_ms"] is not None


@pytest.mark.asyncio
async def test_readiness_ping_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(health_router, "_PING_TIMEOUT_SECONDS", 0.01)

    async def slow_ping() -> bool:
        await asyncio.sleep(1)
        return True

    exchange_store = SimpleNamespace(ping=slow_ping)

    status_code, payload = await _ready(
        SimpleNamespace(services=_services(exchange_store=exchange_store))
    )

    assert status_code == 503
    assert payload["checks"]["exchange_store"] == {
        "status": "failed",
        "latency_ms": None,
        "error": "timeout",
    }
