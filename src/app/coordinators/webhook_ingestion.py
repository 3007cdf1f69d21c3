"""Controllers de ingestão de webhooks (um por origem).

Máquina de estados compartilhada:
    received → acknowledged → validated → extracted → dispatched | dropped

O ack HTTP já foi enviado pela rota quando ingest() roda; qualquer
descarte aqui é apenas logado e nunca altera a resposta.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl

from api.connectors.calendly.signature import (
    SIGNATURE_HEADER as CALENDLY_SIGNATURE_HEADER,
)
from api.connectors.calendly.signature import validate_calendly_signature
from api.connectors.twilio.signature import (
    SIGNATURE_HEADER as TWILIO_SIGNATURE_HEADER,
)
from api.connectors.twilio.signature import validate_twilio_signature
from api.normalizers.calendly.extractor import (
    extract_calendly_event,
    validate_calendly_event,
)
from api.normalizers.twilio.extractor import extract_twilio_event, validate_twilio_event
from app.observability import reset_correlation_id, set_correlation_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from api.routes.webhook_runtime_tasks import BackgroundTaskRunner
    from app.domain.inbound_event import InboundEvent
    from app.protocols.dedupe import AsyncDedupeProtocol
    from config.settings.calendly import CalendlySettings
    from config.settings.twilio import TwilioSettings

logger = logging.getLogger(__name__)


class IngestionOutcome(StrEnum):
    """Estado final de uma ingestão."""

    DISPATCHED = "dispatched"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED = "malformed"
    MISSING_FIELDS = "missing_fields"
    IGNORED = "ignored"
    DUPLICATE = "duplicate"

    @property
    def dropped(self) -> bool:
        return self is not IngestionOutcome.DISPATCHED


@dataclass(frozen=True, slots=True)
class RawWebhook:
    """Request inbound capturado pela rota antes do ack."""

    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)
    url: str = ""
    correlation_id: str = ""


class WebhookIngestionController(ABC):
    """Fluxo comum: valida, extrai, checa campos e despacha em background."""

    channel: str = "webhook"

    def __init__(
        self,
        *,
        runner: BackgroundTaskRunner,
        handler: Callable[[InboundEvent], Awaitable[Any]],
    ) -> None:
        self._runner = runner
        self._handler = handler

    async def ingest(self, raw: RawWebhook) -> IngestionOutcome:
        """Executa a máquina de estados e retorna o resultado final."""
        token = set_correlation_id(raw.correlation_id or None)
        try:
            outcome = await self._ingest(raw)
        finally:
            reset_correlation_id(token)
        return outcome

    async def _ingest(self, raw: RawWebhook) -> IngestionOutcome:
        try:
            payload = self._parse(raw.body)
        except ValueError as exc:
            return self._drop(IngestionOutcome.MALFORMED, reason=type(exc).__name__)

        if not self._validate_signature(raw, payload):
            return self._drop(IngestionOutcome.INVALID_SIGNATURE, reason="signature_mismatch")

        try:
            event = self._extract(payload)
        except ValueError as exc:
            return self._drop(IngestionOutcome.MALFORMED, reason=str(exc))

        reason = self._check(event)
        if reason is not None:
            outcome = (
                IngestionOutcome.MISSING_FIELDS
                if reason in ("missing_actor", "empty_content", "insufficient_data")
                else IngestionOutcome.IGNORED
            )
            return self._drop(outcome, reason=reason, event_type=event.event_type)

        if await self._is_duplicate(event):
            return self._drop(IngestionOutcome.DUPLICATE, reason="duplicate_message")

        self._runner.schedule(
            self._handler(event),
            correlation_id=raw.correlation_id,
            channel=self.channel,
        )
        logger.info(
            "webhook_dispatched",
            extra={"channel": self.channel, "event_type": event.event_type},
        )
        return IngestionOutcome.DISPATCHED

    def _drop(
        self,
        outcome: IngestionOutcome,
        *,
        reason: str,
        event_type: str | None = None,
    ) -> IngestionOutcome:
        log = logger.warning if outcome is IngestionOutcome.INVALID_SIGNATURE else logger.info
        log(
            "webhook_dropped",
            extra={
                "channel": self.channel,
                "outcome": str(outcome),
                "reason": reason,
                "event_type": event_type,
            },
        )
        return outcome

    async def _is_duplicate(self, event: InboundEvent) -> bool:
        return False

    @abstractmethod
    def _parse(self, body: bytes) -> Any:
        """Decodifica o corpo bruto (ValueError = malformado)."""

    @abstractmethod
    def _validate_signature(self, raw: RawWebhook, payload: Any) -> bool:
        """Valida a assinatura da origem."""

    @abstractmethod
    def _extract(self, payload: Any) -> InboundEvent:
        """Converte o payload em InboundEvent (ValueError = malformado)."""

    @abstractmethod
    def _check(self, event: InboundEvent) -> str | None:
        """Retorna motivo de descarte, ou None se o evento deve ser despachado."""


class TwilioIngestionController(WebhookIngestionController):
    """Ingestão de mensagens WhatsApp (Twilio, form-encoded).

    Twilio reenvia o webhook quando não recebe ack a tempo: MessageSid já
    despachado é descartado via store de dedupe.
    """

    channel = "twilio"

    def __init__(
        self,
        *,
        settings: TwilioSettings,
        runner: BackgroundTaskRunner,
        handler: Callable[[InboundEvent], Awaitable[Any]],
        dedupe: AsyncDedupeProtocol | None = None,
        dedupe_ttl_seconds: int = 3600,
        default_country: str = "+34",
    ) -> None:
        super().__init__(runner=runner, handler=handler)
        self._settings = settings
        self._dedupe = dedupe
        self._dedupe_ttl_seconds = dedupe_ttl_seconds
        self._default_country = default_country

    def _parse(self, body: bytes) -> dict[str, str]:
        return dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))

    def _validate_signature(self, raw: RawWebhook, payload: dict[str, str]) -> bool:
        return validate_twilio_signature(
            raw.url,
            payload.items(),
            raw.headers.get(TWILIO_SIGNATURE_HEADER),
            self._settings.auth_token,
            enabled=self._settings.validate_signature,
        )

    def _extract(self, payload: dict[str, str]) -> InboundEvent:
        return extract_twilio_event(payload, default_country=self._default_country)

    def _check(self, event: InboundEvent) -> str | None:
        return validate_twilio_event(event, self._settings.whatsapp_number or None)

    async def _is_duplicate(self, event: InboundEvent) -> bool:
        if self._dedupe is None or not event.message_id:
            return False
        try:
            return await self._dedupe.seen(event.message_id, self._dedupe_ttl_seconds)
        except Exception as exc:
            logger.warning(
                "webhook_dedupe_unavailable",
                extra={"channel": self.channel, "error_type": type(exc).__name__},
            )
            return False


class CalendlyIngestionController(WebhookIngestionController):
    """Ingestão de eventos de agendamento (Calendly, JSON)."""

    channel = "calendly"

    def __init__(
        self,
        *,
        settings: CalendlySettings,
        runner: BackgroundTaskRunner,
        handler: Callable[[InboundEvent], Awaitable[Any]],
        default_country: str = "+34",
    ) -> None:
        super().__init__(runner=runner, handler=handler)
        self._settings = settings
        self._default_country = default_country

    def _parse(self, body: bytes) -> Any:
        # json.JSONDecodeError e UnicodeDecodeError são ValueError
        return json.loads(body)

    def _validate_signature(self, raw: RawWebhook, payload: Any) -> bool:
        return validate_calendly_signature(
            raw.body,
            raw.headers.get(CALENDLY_SIGNATURE_HEADER),
            self._settings.signing_key,
            enabled=self._settings.validate_signature,
        )

    def _extract(self, payload: Any) -> InboundEvent:
        # CalendlyPayloadError é ValueError
        return extract_calendly_event(payload, default_country=self._default_country)

    def _check(self, event: InboundEvent) -> str | None:
        return validate_calendly_event(event, self._settings.supported_events)
