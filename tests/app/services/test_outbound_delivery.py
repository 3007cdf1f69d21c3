"""Testes do OutboundDeliveryService."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from api.connectors.twilio.errors import DeliveryErrorKind
from app.protocols.messaging_transport import MessagingTransportProtocol, TransportError
from app.services.outbound_delivery import (
    OutboundDeliveryService,
    OutboundMessage,
    estimate_cost,
)
from app.services.rate_limiter import RateLimiter
from tests.fakes.fake_services import FakeTransport

PHONE = "+34600000001"


def _service(
    transport: MessagingTransportProtocol,
    *,
    max_per_window: int = 10,
    **kwargs,
) -> tuple[OutboundDeliveryService, AsyncMock]:
    sleep = AsyncMock()
    service = OutboundDeliveryService(
        transport,
        RateLimiter(max_per_window, 60),
        sleep=sleep,
        rng=lambda a, b: 0,
        **kwargs,
    )
    return service, sleep


class SlowTransport(MessagingTransportProtocol):
    def __init__(self) -> None:
        self.calls = 0

    async def send(self, to: str, body: str, *, media_url: str | None = None) -> str:
        self.calls += 1
        await asyncio.sleep(1)
        return "SM-late"


@pytest.mark.asyncio
async def test_success_first_attempt() -> None:
    transport = FakeTransport(["SM1"])
    service, sleep = _service(transport)

    result = await service.send("600 000 001", "  Hola  ")

    assert result.success is True
    assert result.message_id == "SM1"
    assert result.recipient == PHONE
    assert result.attempts == 1
    assert result.cost == pytest.approx(0.0042)
    assert transport.calls == [{"to": PHONE, "body": "Hola", "media_url": None}]
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_transient_errors_are_retried_with_backoff() -> None:
    transport = FakeTransport([TransportError("503"), TransportError("503"), "SM3"])
    service, sleep = _service(transport, base_delay_seconds=1.0)

    result = await service.send(PHONE, "Hola")

    assert result.success is True
    assert result.attempts == 3
    assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]
    snapshot = service.snapshot()
    assert snapshot["sent"] == 1
    assert snapshot["successful"] == 1
    assert snapshot["failed"] == 0


@pytest.mark.asyncio
async def test_exhausted_retries_count_one_failure() -> None:
    transport = FakeTransport([TransportError("503")] * 3)
    service, sleep = _service(transport, max_attempts=3)

    result = await service.send(PHONE, "Hola")

    assert result.success is False
    assert result.error_kind is DeliveryErrorKind.TRANSIENT
    assert result.attempts == 3
    assert len(transport.calls) == 3
    assert sleep.await_count == 2
    snapshot = service.snapshot()
    assert snapshot["sent"] == 1
    assert snapshot["failed"] == 1


@pytest.mark.asyncio
async def test_permanent_error_is_not_retried() -> None:
    transport = FakeTransport([TransportError("invalid", code=21211, status_code=400)])
    service, sleep = _service(transport)

    result = await service.send(PHONE, "Hola")

    assert result.success is False
    assert result.error_kind is DeliveryErrorKind.INVALID_RECIPIENT
    assert result.error == "Número de teléfono inválido"
    assert result.attempts == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_accepted_without_sid_is_not_retried() -> None:
    transport = FakeTransport([TransportError("twilio_missing_sid", status_code=201), "SM2"])
    service, sleep = _service(transport)

    result = await service.send(PHONE, "Hola")

    assert result.success is False
    assert result.error_kind is DeliveryErrorKind.UNCONFIRMED
    assert result.attempts == 1
    assert len(transport.calls) == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_upstream_rate_limit_is_not_retried() -> None:
    transport = FakeTransport([TransportError("too many", status_code=429)])
    service, _ = _service(transport)

    result = await service.send(PHONE, "Hola")

    assert result.error_kind is DeliveryErrorKind.UPSTREAM_RATE_LIMIT
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_timeout_counts_as_transient() -> None:
    transport = SlowTransport()
    service, _ = _service(transport, timeout_seconds=0.01, max_attempts=2)

    result = await service.send(PHONE, "Hola")

    assert result.success is False
    assert result.error_kind is DeliveryErrorKind.TRANSIENT
    assert transport.calls == 2


@pytest.mark.asyncio
async def test_rate_limited_does_not_call_transport() -> None:
    transport = FakeTransport()
    service, _ = _service(transport, max_per_window=1)

    first = await service.send(PHONE, "Hola")
    second = await service.send(PHONE, "Hola otra vez")

    assert first.success is True
    assert second.success is False
    assert second.rate_limited is True
    assert second.error_kind is DeliveryErrorKind.RATE_LIMITED
    assert len(transport.calls) == 1
    snapshot = service.snapshot()
    assert snapshot["sent"] == 1
    assert snapshot["rate_limited"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("recipient", "body", "kind"),
    [
        ("123", "Hola", DeliveryErrorKind.INVALID_RECIPIENT),
        (PHONE, "   ", DeliveryErrorKind.INVALID_BODY),
        (PHONE, "x" * 1601, DeliveryErrorKind.INVALID_BODY),
    ],
)
async def test_validation_rejects_are_not_counted(
    recipient: str,
    body: str,
    kind: DeliveryErrorKind,
) -> None:
    transport = FakeTransport()
    service, _ = _service(transport)

    result = await service.send(recipient, body)

    assert result.success is False
    assert result.error_kind is kind
    assert result.attempts == 0
    assert transport.calls == []
    assert service.snapshot()["sent"] == 0


@pytest.mark.asyncio
async def test_unexpected_exception_is_transient() -> None:
    transport = FakeTransport([RuntimeError("boom"), "SM2"])
    service, _ = _service(transport)

    result = await service.send(PHONE, "Hola")

    assert result.success is True
    assert result.attempts == 2


@pytest.mark.asyncio
async def test_media_url_is_forwarded() -> None:
    transport = FakeTransport()
    service, _ = _service(transport)

    await service.send(PHONE, "Mira", media_url="https://x.test/a.jpg")

    assert transport.calls[0]["media_url"] == "https://x.test/a.jpg"


@pytest.mark.asyncio
async def test_send_bulk_batches_and_pauses() -> None:
    transport = FakeTransport()
    service, sleep = _service(transport)
    messages = [OutboundMessage(to=f"+3460000000{i}", body=f"Hola {i}") for i in range(1, 6)]

    results = await service.send_bulk(messages, batch_size=2, batch_delay_seconds=0.5)

    assert len(results) == 5
    assert all(result.success for result in results)
    assert [call.args[0] for call in sleep.await_args_list] == [0.5, 0.5]


@pytest.mark.asyncio
async def test_snapshot_and_reset() -> None:
    transport = FakeTransport(["SM1", TransportError("invalid", code=21211)])
    service, _ = _service(transport)
    await service.send(PHONE, "Hola")
    await service.send("+34600000002", "Hola")

    snapshot = service.snapshot()
    assert snapshot["sent"] == 2
    assert snapshot["successful"] == 1
    assert snapshot["failed"] == 1
    assert snapshot["success_rate"] == 0.5
    assert snapshot["total_cost"] == pytest.approx(0.0042)
    assert snapshot["average_cost"] == pytest.approx(0.0042)

    service.reset()

    snapshot = service.snapshot()
    assert snapshot["sent"] == 0
    assert snapshot["total_cost"] == 0


def test_estimate_cost_by_country_and_segments() -> None:
    assert estimate_cost("+34600000001", "x" * 160) == pytest.approx(0.0042)
    assert estimate_cost("+34600000001", "x" * 161) == pytest.approx(0.0084)
    assert estimate_cost("+525512345678", "Hola") == pytest.approx(0.0065)
    assert estimate_cost("+447700900123", "Hola") == pytest.approx(0.005)


def test_to_dict_omits_recipient() -> None:
    from app.services.outbound_delivery import DeliveryResult

    data = DeliveryResult(success=True, recipient=PHONE, message_id="SM1", attempts=1).to_dict()

    assert "recipient" not in data
    assert data["message_id"] == "SM1"
