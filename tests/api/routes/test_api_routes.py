"""Testes end-to-end das rotas HTTP (webhooks, admin) com fakes in-memory."""

from __future__ import annotations

import json
from urllib.parse import urlencode

import httpx
import pytest

from app.app import create_app
from app.bootstrap.dependencies import ServiceContainer, build_services
from app.infra.stores.memory_stores import MemoryDedupeStore, MemoryExchangeStore
from tests.fakes.fake_services import FakeTextGenerator, FakeTransport

ADMIN_TOKEN = "admin-token-0123456789"
PHONE = "+34600000001"
FORM_HEADERS = {"content-type": "application/x-www-form-urlencoded"}


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setenv("VALIDATE_TWILIO_SIGNATURE", "false")
    monkeypatch.setenv("VALIDATE_CALENDLY_SIGNATURE", "false")
    monkeypatch.setenv("TWILIO_WHATSAPP_NUMBER", "+34900000000")
    monkeypatch.setenv("ADMIN_API_TOKEN", ADMIN_TOKEN)
    return monkeypatch


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def services(env: pytest.MonkeyPatch, transport: FakeTransport) -> ServiceContainer:
    return build_services(
        exchange_store=MemoryExchangeStore(),
        dedupe=MemoryDedupeStore(),
        generator=FakeTextGenerator(),
        transport=transport,
    )


@pytest.fixture
async def client(services: ServiceContainer):
    app = create_app(services)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as http_client:
        yield http_client


def _auth(token: str = ADMIN_TOKEN) -> dict[str, str]:
    return {"authorization": f"Bearer {token}"}


async def _post_whatsapp(client: httpx.AsyncClient, body: str = "Hola", sid: str = "SM1") -> httpx.Response:
    form = {"From": f"whatsapp:{PHONE}", "To": "whatsapp:+34900000000", "Body": body, "MessageSid": sid}
    return await client.post(
        "/webhook/whatsapp",
        content=urlencode(form),
        headers={**FORM_HEADERS, "x-correlation-id": "corr-e2e"},
    )


# ──────────────────────────────────────────────────────────────────────────────
# Webhooks
# ──────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_whatsapp_message_is_acked_and_answered(
    client: httpx.AsyncClient,
    services: ServiceContainer,
    transport: FakeTransport,
) -> None:
    response = await _post_whatsapp(client)
    await services.runner.drain(timeout_seconds=5)

    assert response.status_code == 200
    assert response.json() == {"status": "received", "correlation_id": "corr-e2e"}
    assert len(transport.calls) == 1
    assert transport.calls[0]["to"] == PHONE
    messages = await services.context_store.get(PHONE)
    assert [m.role for m in messages] == ["customer", "assistant"]


@pytest.mark.asyncio
async def test_whatsapp_duplicate_is_acked_but_not_processed(
    client: httpx.AsyncClient,
    services: ServiceContainer,
    transport: FakeTransport,
) -> None:
    first = await _post_whatsapp(client, sid="SM-dup")
    second = await _post_whatsapp(client, sid="SM-dup")
    await services.runner.drain(timeout_seconds=5)

    assert first.status_code == second.status_code == 200
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_whatsapp_malformed_body_is_still_acked(
    client: httpx.AsyncClient,
    services: ServiceContainer,
    transport: FakeTransport,
) -> None:
    response = await client.post("/webhook/whatsapp", content=b"\xff\xfe", headers=FORM_HEADERS)
    await services.runner.drain(timeout_seconds=5)

    assert response.status_code == 200
    assert response.json()["status"] == "received"
    assert transport.calls == []


@pytest.mark.asyncio
async def test_calendly_created_sends_notification(
    client: httpx.AsyncClient,
    services: ServiceContainer,
    transport: FakeTransport,
) -> None:
    body = {
        "event": "invitee.created",
        "payload": {
            "invitee": {"name": "Ana", "phone_number": "600000002"},
            "event": {"name": "Consulta", "start_time": "2026-11-02T10:00:00Z"},
        },
    }

    response = await client.post("/webhook/calendly", content=json.dumps(body))
    await services.runner.drain(timeout_seconds=5)

    assert response.status_code == 200
    assert [call["to"] for call in transport.calls] == ["+34600000002"]
    assert len(services.exchange_store.scheduling_events) == 1


@pytest.mark.asyncio
async def test_calendly_unsupported_event_sends_nothing(
    client: httpx.AsyncClient,
    services: ServiceContainer,
    transport: FakeTransport,
) -> None:
    body = {"event": "invitee.updated", "payload": {"invitee": {"name": "Ana", "phone_number": "600000002"}}}

    response = await client.post("/webhook/calendly", content=json.dumps(body))
    await services.runner.drain(timeout_seconds=5)

    assert response.status_code == 200
    assert transport.calls == []


# ──────────────────────────────────────────────────────────────────────────────
# Health
# ──────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health_and_ready(client: httpx.AsyncClient) -> None:
    health = await client.get("/health")
    ready = await client.get("/ready")

    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert ready.status_code == 200
    assert ready.json()["checks"]["generation"]["status"] == "ok"


# ──────────────────────────────────────────────────────────────────────────────
# Admin
# ──────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_admin_requires_valid_token(client: httpx.AsyncClient) -> None:
    missing = await client.get("/admin/metrics")
    wrong = await client.get("/admin/metrics", headers=_auth("wrong-token-0123456789"))
    ok = await client.get("/admin/metrics", headers=_auth())

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert wrong.headers["www-authenticate"] == "Bearer"
    assert ok.status_code == 200


@pytest.mark.asyncio
async def test_admin_disabled_without_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ADMIN_API_TOKEN", raising=False)
    services = build_services(
        exchange_store=MemoryExchangeStore(),
        dedupe=MemoryDedupeStore(),
        generator=FakeTextGenerator(),
        transport=FakeTransport(),
    )
    app = create_app(services)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as http_client:
        response = await http_client.get("/admin/metrics", headers=_auth())

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_admin_manual_message_and_history(
    client: httpx.AsyncClient,
    transport: FakeTransport,
) -> None:
    sent = await client.post(
        "/admin/messages",
        json={"phone_number": "600 000 001", "message": "Su cita está confirmada"},
        headers=_auth(),
    )
    history = await client.get("/admin/conversations/600000001", headers=_auth())

    assert sent.status_code == 200
    assert sent.json()["success"] is True
    assert transport.calls[0]["to"] == PHONE
    payload = history.json()
    assert payload["phone_number"] == PHONE
    assert payload["message_count"] == 1
    assert payload["messages"][0]["manual"] is True
    assert payload["patterns"]["assistant_messages"] == 1
    assert payload["patterns"]["customer_messages"] == 0


@pytest.mark.asyncio
async def test_admin_manual_message_validation(client: httpx.AsyncClient) -> None:
    empty = await client.post(
        "/admin/messages",
        json={"phone_number": PHONE, "message": ""},
        headers=_auth(),
    )
    invalid_phone = await client.post(
        "/admin/messages",
        json={"phone_number": "123", "message": "Hola"},
        headers=_auth(),
    )

    assert empty.status_code == 422
    assert invalid_phone.status_code == 200
    assert invalid_phone.json()["success"] is False
    assert invalid_phone.json()["error_kind"] == "invalid_recipient"


@pytest.mark.asyncio
async def test_admin_conversations_listing_export_and_clear(
    client: httpx.AsyncClient,
    services: ServiceContainer,
) -> None:
    await _post_whatsapp(client)
    await services.runner.drain(timeout_seconds=5)

    listing = await client.get("/admin/conversations", params={"min_messages": 2}, headers=_auth())
    export = await client.get("/admin/conversations/export", headers=_auth())
    cleared = await client.delete(f"/admin/conversations/{PHONE}", headers=_auth())
    bad_phone = await client.delete("/admin/conversations/abc", headers=_auth())

    assert listing.json()["total"] == 1
    assert listing.json()["conversations"][0]["phone_number"] == PHONE
    assert export.json()["total_contexts"] == 1
    assert cleared.json() == {"phone_number": PHONE, "cleared": True}
    assert bad_phone.status_code == 400


@pytest.mark.asyncio
async def test_admin_single_export_and_listing_from_store(
    client: httpx.AsyncClient,
    services: ServiceContainer,
) -> None:
    await _post_whatsapp(client)
    await services.runner.drain(timeout_seconds=5)
    await services.context_store.append("+34600000002", "customer", "Otro cliente")

    single = await client.get(
        "/admin/conversations/export",
        params={"phone": "600000001"},
        headers=_auth(),
    )
    bad_phone = await client.get(
        "/admin/conversations/export",
        params={"phone": "abc"},
        headers=_auth(),
    )
    await client.delete(f"/admin/conversations/{PHONE}", headers=_auth())
    listing = await client.get("/admin/conversations", headers=_auth())

    assert single.json()["total_contexts"] == 1
    assert list(single.json()["contexts"]) == [PHONE]
    assert bad_phone.status_code == 400
    rows = {row["phone_number"]: row for row in listing.json()["conversations"]}
    assert rows["+34600000002"]["is_active"] is True
    assert rows[PHONE]["is_active"] is False
    assert rows[PHONE]["message_count"] == 2


@pytest.mark.asyncio
async def test_admin_metrics_and_reset(
    client: httpx.AsyncClient,
    services: ServiceContainer,
) -> None:
    await _post_whatsapp(client)
    await services.runner.drain(timeout_seconds=5)

    metrics = (await client.get("/admin/metrics", headers=_auth())).json()
    reset = await client.post("/admin/metrics/reset", headers=_auth())
    after = (await client.get("/admin/metrics", headers=_auth())).json()

    assert metrics["delivery"]["sent"] == 1
    assert metrics["generation"]["requests"] == 1
    assert metrics["context"]["active_contexts"] == 1
    assert reset.json() == {"status": "reset"}
    assert after["delivery"]["sent"] == 0
