"""Firestore Exchange Store: histórico persistente de trocas e eventos.

Estrutura no Firestore:
    {collection_exchanges}/{auto_id}         (uma troca cliente → assistente)
    {collection_scheduling_events}/{auto_id} (auditoria de eventos Calendly)

O SDK do Firestore é síncrono: todas as chamadas rodam em asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.records import ExchangeRecord
from app.protocols.exchange_store import ExchangeStoreProtocol
from utils.errors import ExchangeStoreError
from utils.phone import mask_phone

if TYPE_CHECKING:
    from collections.abc import Sequence

    from google.cloud.firestore import Client as FirestoreClient

    from app.domain.records import SchedulingEventRecord

logger = logging.getLogger(__name__)

EXCHANGES_COLLECTION = "whatsapp_conversations"
SCHEDULING_EVENTS_COLLECTION = "calendly_events"


class FirestoreExchangeStore(ExchangeStoreProtocol):
    """Store de trocas usando Firestore.

    Args:
        firestore_client: Cliente Firestore
        exchanges_collection: Coleção das trocas
        scheduling_events_collection: Coleção dos eventos de agendamento
    """

    def __init__(
        self,
        firestore_client: FirestoreClient,
        *,
        exchanges_collection: str = EXCHANGES_COLLECTION,
        scheduling_events_collection: str = SCHEDULING_EVENTS_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._exchanges_collection = exchanges_collection
        self._scheduling_events_collection = scheduling_events_collection

    async def save_exchange(self, record: ExchangeRecord) -> None:
        await asyncio.to_thread(self._save_exchange_sync, record)

    def _save_exchange_sync(self, record: ExchangeRecord) -> None:
        doc_data = record.to_dict()
        # Timestamp nativo permite order_by cronológico
        doc_data["processed_at"] = record.processed_at
        doc_data["created_at"] = datetime.now(UTC)
        try:
            self._db.collection(self._exchanges_collection).add(doc_data)
        except Exception as e:
            logger.error(
                "exchange_save_error",
                extra={"error_type": type(e).__name__, "phone": mask_phone(record.phone_number)},
            )
            raise ExchangeStoreError(f"Erro ao persistir troca: {type(e).__name__}") from e
        logger.debug(
            "exchange_saved",
            extra={"phone": mask_phone(record.phone_number), "success": record.success},
        )

    async def get_recent_exchanges(
        self,
        phone_number: str,
        *,
        limit: int = 10,
    ) -> Sequence[ExchangeRecord]:
        if limit <= 0:
            return []
        return await asyncio.to_thread(self._get_recent_exchanges_sync, phone_number, limit)

    def _get_recent_exchanges_sync(self, phone_number: str, limit: int) -> list[ExchangeRecord]:
        from google.cloud.firestore import Query

        try:
            docs = (
                self._db.collection(self._exchanges_collection)
                .where("phone_number", "==", phone_number)
                .order_by("processed_at", direction=Query.DESCENDING)
                .limit(limit)
                .stream()
            )
            records = [_record_from_doc(doc.to_dict() or {}) for doc in docs]
        except Exception as e:
            logger.error(
                "exchange_get_error",
                extra={"error_type": type(e).__name__, "phone": mask_phone(phone_number)},
            )
            raise ExchangeStoreError(f"Erro ao ler trocas: {type(e).__name__}") from e

        logger.debug(
            "exchanges_retrieved",
            extra={"phone": mask_phone(phone_number), "count": len(records)},
        )
        return records

    async def get_recent_conversations(self, *, limit: int = 100) -> Sequence[ExchangeRecord]:
        if limit <= 0:
            return []
        return await asyncio.to_thread(self._get_recent_conversations_sync, limit)

    def _get_recent_conversations_sync(self, limit: int) -> list[ExchangeRecord]:
        from google.cloud.firestore import Query

        try:
            docs = (
                self._db.collection(self._exchanges_collection)
                .order_by("processed_at", direction=Query.DESCENDING)
                .limit(limit)
                .stream()
            )
            records = [_record_from_doc(doc.to_dict() or {}) for doc in docs]
        except Exception as e:
            logger.error("recent_conversations_get_error", extra={"error_type": type(e).__name__})
            raise ExchangeStoreError(f"Erro ao ler conversas recentes: {type(e).__name__}") from e
        return records

    async def ping(self) -> bool:
        """Readiness: lê o documento de health (True se existe)."""
        return await asyncio.to_thread(self._ping_sync)

    def _ping_sync(self) -> bool:
        doc = self._db.collection("_health").document("check").get()
        return bool(getattr(doc, "exists", False))

    async def save_scheduling_event(self, record: SchedulingEventRecord) -> None:
        await asyncio.to_thread(self._save_scheduling_event_sync, record)

    def _save_scheduling_event_sync(self, record: SchedulingEventRecord) -> None:
        doc_data = record.to_dict()
        doc_data["processed_at"] = record.processed_at
        try:
            self._db.collection(self._scheduling_events_collection).add(doc_data)
        except Exception as e:
            logger.error(
                "scheduling_event_save_error",
                extra={"error_type": type(e).__name__, "event_type": record.event_type},
            )
            raise ExchangeStoreError(
                f"Erro ao persistir evento de agendamento: {type(e).__name__}"
            ) from e


def _record_from_doc(data: dict[str, Any]) -> ExchangeRecord:
    processed_at = data.get("processed_at")
    if isinstance(processed_at, str):
        processed_at = datetime.fromisoformat(processed_at)
    if not isinstance(processed_at, datetime):
        processed_at = datetime.now(UTC)
    return ExchangeRecord(
        phone_number=str(data.get("phone_number", "")),
        message_in=str(data.get("message_in") or ""),
        message_out=data.get("message_out"),
        message_in_id=data.get("message_in_id"),
        message_out_id=data.get("message_out_id"),
        processed_at=processed_at,
        message_type=str(data.get("message_type") or "text"),
        has_media=bool(data.get("has_media", False)),
        success=bool(data.get("success", True)),
    )
