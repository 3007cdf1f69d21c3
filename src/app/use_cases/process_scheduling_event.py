"""Use case de evento de agendamento (Calendly → notificação WhatsApp)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from ai.prompts.scheduling_prompt import SchedulingDetails, build_scheduling_prompt
from app.domain.records import SchedulingEventRecord
from app.services.response_generation import GenerationOptions
from utils.phone import mask_phone

if TYPE_CHECKING:
    from collections.abc import Callable

    from ai.config.business_profile import BusinessProfile
    from app.domain.inbound_event import InboundEvent
    from app.protocols.exchange_store import ExchangeStoreProtocol
    from app.services.conversation_context import ConversationContextStore
    from app.services.outbound_delivery import OutboundDeliveryService
    from app.services.response_generation import GenerativeResponseService

logger = logging.getLogger(__name__)

NOTIFICATION_OPTIONS = GenerationOptions(max_tokens=300, temperature=0.7)


@dataclass(frozen=True, slots=True)
class SchedulingEventResult:
    """Resultado do processamento de um evento de agendamento."""

    notified: bool
    message_id: str | None = None
    skipped_reason: str | None = None


class ProcessSchedulingEventUseCase:
    """Notifica o convidado por WhatsApp sobre criação/cancelamento/remarcação."""

    def __init__(
        self,
        *,
        context_store: ConversationContextStore,
        response_service: GenerativeResponseService,
        delivery_service: OutboundDeliveryService,
        exchange_store: ExchangeStoreProtocol | None,
        profile_loader: Callable[[], BusinessProfile],
    ) -> None:
        self._context_store = context_store
        self._response_service = response_service
        self._delivery_service = delivery_service
        self._exchange_store = exchange_store
        self._profile_loader = profile_loader

    async def execute(self, event: InboundEvent) -> SchedulingEventResult:
        event_type = event.event_type or ""
        invitee = _section(event.metadata, "invitee")
        details = _section(event.metadata, "event")
        links = _section(event.metadata, "links")

        phone = event.actor_id
        if not phone:
            logger.warning(
                "scheduling_event_invalid_phone",
                extra={"event_type": event_type, "has_phone": bool(invitee.get("phone_number"))},
            )
            return SchedulingEventResult(notified=False, skipped_reason="invalid_phone")

        prompt = build_scheduling_prompt(
            self._profile_loader(),
            event_type,
            SchedulingDetails(
                invitee_name=event.content,
                event_name=str(details.get("name") or ""),
                start_time=str(details.get("start_time") or ""),
                cancel_url=str(links.get("cancel_url") or ""),
                reschedule_url=str(links.get("reschedule_url") or ""),
            ),
        )
        message = await self._response_service.generate(prompt, NOTIFICATION_OPTIONS)
        if message is None:
            logger.error(
                "scheduling_notification_not_generated",
                extra={"event_type": event_type},
            )
            return SchedulingEventResult(notified=False, skipped_reason="generation_failed")

        delivery = await self._delivery_service.send(phone, message)
        if delivery.success:
            await self._context_store.append(
                phone,
                "assistant",
                message,
                {"message_id": delivery.message_id},
            )
            logger.info(
                "scheduling_notification_sent",
                extra={
                    "event_type": event_type,
                    "recipient": mask_phone(phone),
                    "message_id": delivery.message_id,
                },
            )
        else:
            logger.error(
                "scheduling_notification_delivery_failed",
                extra={
                    "event_type": event_type,
                    "recipient": mask_phone(phone),
                    "error_kind": str(delivery.error_kind),
                },
            )

        await self._persist(
            SchedulingEventRecord(
                event_type=event_type,
                invitee_name=event.content,
                invitee_email=invitee.get("email"),
                invitee_phone=phone,
                event_name=details.get("name"),
                event_start_time=details.get("start_time"),
                message_sent=delivery.success,
                message_content=message,
                message_id=delivery.message_id,
                processed_at=datetime.now(UTC),
            )
        )
        return SchedulingEventResult(notified=delivery.success, message_id=delivery.message_id)

    async def _persist(self, record: SchedulingEventRecord) -> None:
        if self._exchange_store is None:
            return
        try:
            await self._exchange_store.save_scheduling_event(record)
        except Exception as exc:
            logger.warning(
                "scheduling_event_persist_failed",
                extra={"event_type": record.event_type, "error_type": type(exc).__name__},
            )


def _section(metadata: dict[str, Any], name: str) -> dict[str, Any]:
    value = metadata.get(name)
    return value if isinstance(value, dict) else {}
