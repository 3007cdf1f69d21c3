"""Evento inbound normalizado, independente da origem do webhook."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

EventSource = Literal["twilio", "calendly"]


@dataclass(frozen=True, slots=True)
class InboundEvent:
    """Forma comum produzida pelos extractors de cada origem.

    Attributes:
        source: Origem do webhook
        actor_id: Identificador do cliente (telefone E.164 quando conhecido)
        event_type: Tipo do evento (ex.: "message", "invitee.created")
        content: Conteúdo textual principal (corpo da mensagem ou nome do convidado)
        message_id: ID do evento no provedor (usado para dedupe)
        metadata: Campos específicos da origem
    """

    source: EventSource
    actor_id: str | None
    event_type: str | None
    content: str = ""
    message_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
