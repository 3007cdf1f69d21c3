"""Testes do FirestoreExchangeStore com cliente mockado."""

from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.domain.records import ExchangeRecord, SchedulingEventRecord
from app.infra.stores.firestore_exchange_store import FirestoreExchangeStore
from utils.errors import ExchangeStoreError

PROCESSED_AT = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


def _record() -> ExchangeRecord:
    return ExchangeRecord(
        phone_number="+34600000001",
        message_in="Hola",
        message_out="¡Hola!",
        message_in_id="SM-in",
        message_out_id="SM-out",
        processed_at=PROCESSED_AT,
    )


@pytest.mark.asyncio
async def test_save_exchange_adds_document() -> None:
    client = MagicMock()
    store = FirestoreExchangeStore(client, exchanges_collection="trocas")

    await store.save_exchange(_record())

    client.collection.assert_called_with("trocas")
    doc = client.collection.return_value.add.call_args.args[0]
    assert doc["phone_number"] == "+34600000001"
    assert doc["processed_at"] == PROCESSED_AT
    assert "created_at" in doc


@pytest.mark.asyncio
async def test_save_exchange_wraps_errors() -> None:
    client = MagicMock()
    client.collection.return_value.add.side_effect = RuntimeError("unavailable")
    store = FirestoreExchangeStore(client)

    with pytest.raises(ExchangeStoreError):
        await store.save_exchange(_record())


@pytest.mark.asyncio
async def test_get_recent_exchanges_builds_records() -> None:
    client = MagicMock()
    query = client.collection.return_value.where.return_value.order_by.return_value.limit.return_value
    query.stream.return_value = [
        SimpleNamespace(to_dict=lambda: {**_record().to_dict(), "processed_at": PROCESSED_AT}),
        SimpleNamespace(to_dict=lambda: {"phone_number": "+34600000001", "message_in": "Antes",
                                          "processed_at": "2026-09-30T10:00:00+00:00"}),
    ]
    store = FirestoreExchangeStore(client)

    records = await store.get_recent_exchanges("+34600000001", limit=2)

    assert [record.message_in for record in records] == ["Hola", "Antes"]
    assert records[1].processed_at.year == 2026
    assert records[1].message_out is None
    client.collection.return_value.where.assert_called_once_with("phone_number", "==", "+34600000001")


@pytest.mark.asyncio
async def test_get_recent_exchanges_wraps_errors_and_zero_limit() -> None:
    client = MagicMock()
    client.collection.return_value.where.side_effect = RuntimeError("unavailable")
    store = FirestoreExchangeStore(client)

    assert await store.get_recent_exchanges("+34600000001", limit=0) == []
    with pytest.raises(ExchangeStoreError):
        await store.get_recent_exchanges("+34600000001")


@pytest.mark.asyncio
async def test_get_recent_conversations_orders_whole_collection() -> None:
    client = MagicMock()
    query = client.collection.return_value.order_by.return_value.limit.return_value
    query.stream.return_value = [
        SimpleNamespace(to_dict=lambda: {**_record().to_dict(), "processed_at": PROCESSED_AT}),
    ]
    store = FirestoreExchangeStore(client, exchanges_collection="trocas")

    records = await store.get_recent_conversations(limit=20)

    assert [record.phone_number for record in records] == ["+34600000001"]
    client.collection.assert_called_with("trocas")
    client.collection.return_value.where.assert_not_called()
    client.collection.return_value.order_by.return_value.limit.assert_called_once_with(20)


@pytest.mark.asyncio
async def test_get_recent_conversations_wraps_errors() -> None:
    client = MagicMock()
    client.collection.return_value.order_by.side_effect = RuntimeError("unavailable")
    store = FirestoreExchangeStore(client)

    assert await store.get_recent_conversations(limit=0) == []
    with pytest.raises(ExchangeStoreError):
        await store.get_recent_conversations()


@pytest.mark.asyncio
async def test_save_scheduling_event() -> None:
    client = MagicMock()
    store = FirestoreExchangeStore(client, scheduling_events_collection="eventos")

    await store.save_scheduling_event(
        SchedulingEventRecord(
            event_type="invitee.created",
            invitee_name="Ana",
            invitee_email=None,
            invitee_phone="+34600000002",
            event_name=None,
            event_start_time=None,
            message_sent=True,
            message_content="Hola Ana",
            message_id="SM1",
            processed_at=PROCESSED_AT,
        )
    )

    client.collection.assert_called_with("eventos")
    assert client.collection.return_value.add.call_args.args[0]["event_type"] == "invitee.created"


@pytest.mark.asyncio
@pytest.mark.parametrize("exists", [True, False])
async def test_ping_reads_health_document(exists: bool) -> None:
    client = MagicMock()
    client.collection.return_value.document.return_value.get.return_value = SimpleNamespace(exists=exists)

    assert await FirestoreExchangeStore(client).ping() is exists
