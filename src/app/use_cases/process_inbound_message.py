"""Use case de mensagem inbound do cliente (canal WhatsApp).

Fluxo:
1. Carrega contexto do cliente
2. Registra a mensagem do cliente no contexto
3. Monta prompt contextual (perfil do negócio + histórico recente)
4. Gera resposta (None = sem resposta; grava troca falha e encerra)
5. Entrega a resposta
6. Em sucesso, registra a resposta do assistente no contexto
7. Persiste a troca (erros de persistência são logados e engolidos)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ai.prompts.conversation_prompt import HISTORY_MESSAGES, build_conversation_prompt
from app.domain.records import ExchangeRecord
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

REPLY_OPTIONS = GenerationOptions(max_tokens=500, temperature=0.8)


@dataclass(frozen=True, slots=True)
class InboundMessageResult:
    """Resultado do processamento de uma mensagem inbound."""

    replied: bool
    message_id: str | None = None
    error: str | None = None


class ProcessInboundMessageUseCase:
    """Responde a uma mensagem do cliente usando o contexto da conversa."""

    def __init__(
        self,
        *,
        context_store: ConversationContextStore,
        response_service: GenerativeResponseService,
        delivery_service: OutboundDeliveryService,
        exchange_store: ExchangeStoreProtocol | None,
        profile_loader: Callable[[], BusinessProfile],
        history_messages: int = HISTORY_MESSAGES,
    ) -> None:
        self._context_store = context_store
        self._response_service = response_service
        self._delivery_service = delivery_service
        self._exchange_store = exchange_store
        self._profile_loader = profile_loader
        self._history_messages = history_messages

    async def execute(self, event: InboundEvent) -> InboundMessageResult:
        customer = event.actor_id or ""
        has_media = bool(event.metadata.get("has_media", False))
        message_type = str(event.metadata.get("message_type") or "text")

        history = await self._context_store.get(customer)
        await self._context_store.append(
            customer,
            "customer",
            event.content,
            {"message_id": event.message_id, "has_media": has_media},
        )

        prompt = build_conversation_prompt(
            self._profile_loader(),
            event.content,
            history,
            history_messages=self._history_messages,
        )
        reply = await self._response_service.generate(prompt, REPLY_OPTIONS)
        if reply is None:
            logger.error(
                "inbound_reply_not_generated",
                extra={"customer": mask_phone(customer), "content_length": len(event.content)},
            )
            await self._persist(
                ExchangeRecord(
                    phone_number=customer,
                    message_in=event.content,
                    message_out=None,
                    message_in_id=event.message_id,
                    message_out_id=None,
                    processed_at=datetime.now(UTC),
                    message_type=message_type,
                    has_media=has_media,
                    success=False,
                )
            )
            return InboundMessageResult(replied=False, error="generation_failed")

        delivery = await self._delivery_service.send(customer, reply)
        if delivery.success:
            await self._context_store.append(
                customer,
                "assistant",
                reply,
                {"message_id": delivery.message_id},
            )
            logger.info(
                "inbound_reply_sent",
                extra={
                    "customer": mask_phone(customer),
                    "message_id": delivery.message_id,
                    "reply_length": len(reply),
                },
            )
        else:
            logger.error(
                "inbound_reply_delivery_failed",
                extra={
                    "customer": mask_phone(customer),
                    "error_kind": str(delivery.error_kind),
                    "attempts": delivery.attempts,
                },
            )

        await self._persist(
            ExchangeRecord(
                phone_number=customer,
                message_in=event.content,
                message_out=reply,
                message_in_id=event.message_id,
                message_out_id=delivery.message_id,
                processed_at=datetime.now(UTC),
                message_type=message_type,
                has_media=has_media,
                success=delivery.success,
            )
        )
        return InboundMessageResult(
            replied=delivery.success,
            message_id=delivery.message_id,
            error=delivery.error,
        )

    async def _persist(self, record: ExchangeRecord) -> None:
        if self._exchange_store is None:
            return
        try:
            await self._exchange_store.save_exchange(record)
        except Exception as exc:
            logger.warning(
                "exchange_persist_failed",
                extra={
                    "customer": mask_phone(record.phone_number),
                    "error_type": type(exc).__name__,
                },
            )
