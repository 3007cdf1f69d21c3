"""Stores em memória: apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import TYPE_CHECKING

from app.protocols.dedupe import AsyncDedupeProtocol
from app.protocols.exchange_store import ExchangeStoreProtocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.domain.records import ExchangeRecord, SchedulingEventRecord


class MemoryExchangeStore(ExchangeStoreProtocol):
    """Histórico de trocas em memória: apenas para dev/test."""

    def __init__(self, max_records_per_phone: int = 500) -> None:
        self._exchanges: dict[str, list[ExchangeRecord]] = defaultdict(list)
        self._scheduling_events: list[SchedulingEventRecord] = []
        self._max_records_per_phone = max_records_per_phone

    async def save_exchange(self, record: ExchangeRecord) -> None:
        records = self._exchanges[record.phone_number]
        records.append(record)
        if len(records) > self._max_records_per_phone:
            del records[: len(records) - self._max_records_per_phone]

    async def get_recent_exchanges(
        self,
        phone_number: str,
        *,
        limit: int = 10,
    ) -> Sequence[ExchangeRecord]:
        if limit <= 0:
            return []
        records = self._exchanges.get(phone_number, [])
        ordered = sorted(records, key=lambda record: record.processed_at, reverse=True)
        return ordered[:limit]

    async def get_recent_conversations(self, *, limit: int = 100) -> Sequence[ExchangeRecord]:
        if limit <= 0:
            return []
        records = [record for phone_records in self._exchanges.values() for record in phone_records]
        records.sort(key=lambda record: record.processed_at, reverse=True)
        return records[:limit]

    async def save_scheduling_event(self, record: SchedulingEventRecord) -> None:
        self._scheduling_events.append(record)

    @property
    def scheduling_events(self) -> list[SchedulingEventRecord]:
        """Eventos gravados (inspeção em testes)."""
        return list(self._scheduling_events)


class MemoryDedupeStore(AsyncDedupeProtocol):
    """Store de dedupe em memória: apenas para dev/test."""

    def __init__(self) -> None:
        self._store: dict[str, float] = {}  # key -> expires_at

    def _cleanup_expired(self, now: float) -> None:
        expired = [k for k, v in self._store.items() if v <= now]
        for k in expired:
            del self._store[k]

    async def seen(self, key: str, ttl: int = 3600) -> bool:
        """Verifica e marca chave atomicamente (não suspende)."""
        now = time.time()
        self._cleanup_expired(now)
        if key in self._store:
            return True
        self._store[key] = now + ttl
        return False
