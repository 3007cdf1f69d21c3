"""Use case de envio manual (operador via API administrativa)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from utils.phone import mask_phone

if TYPE_CHECKING:
    from app.services.conversation_context import ConversationContextStore
    from app.services.outbound_delivery import DeliveryResult, OutboundDeliveryService

logger = logging.getLogger(__name__)

MANUAL_SENDER = "admin"


class SendManualMessageUseCase:
    """Envia mensagem manual e a registra no contexto do cliente."""

    def __init__(
        self,
        *,
        context_store: ConversationContextStore,
        delivery_service: OutboundDeliveryService,
    ) -> None:
        self._context_store = context_store
        self._delivery_service = delivery_service

    async def execute(
        self,
        phone: str,
        body: str,
        *,
        media_url: str | None = None,
    ) -> DeliveryResult:
        result = await self._delivery_service.send(phone, body, media_url=media_url)
        if result.success and result.recipient:
            await self._context_store.append(
                result.recipient,
                "assistant",
                body.strip(),
                {"message_id": result.message_id, "manual": True, "sent_by": MANUAL_SENDER},
            )
        logger.info(
            "manual_message_processed",
            extra={
                "recipient": mask_phone(result.recipient or phone),
                "success": result.success,
                "error_kind": str(result.error_kind) if result.error_kind else None,
            },
        )
        return result
