"""Extrator de webhooks Calendly (JSON).

Estrutura típica:
    {
        "event": "invitee.created",
        "payload": {
            "invitee": {"name", "email", "phone_number", "cancel_url", "reschedule_url", "uri"},
            "event": {"name", "start_time", "end_time", "timezone"}
        }
    }
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.domain.inbound_event import InboundEvent
from utils.phone import format_phone_number

if TYPE_CHECKING:
    from collections.abc import Collection

logger = logging.getLogger(__name__)


class CalendlyPayloadError(ValueError):
    """Payload Calendly com estrutura inesperada."""


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_calendly_event(
    body: Any,
    *,
    default_country: str = "+34",
) -> InboundEvent:
    """Converte payload do webhook Calendly em InboundEvent.

    Raises:
        CalendlyPayloadError: Se o corpo não for um objeto JSON
    """
    if not isinstance(body, dict):
        raise CalendlyPayloadError("payload_not_object")

    payload = _as_dict(body.get("payload"))
    invitee = _as_dict(payload.get("invitee"))
    details = _as_dict(payload.get("event"))

    raw_phone = invitee.get("phone_number")
    metadata: dict[str, Any] = {
        "invitee": {
            "name": invitee.get("name"),
            "email": invitee.get("email"),
            "phone_number": raw_phone,
        },
        "event": {
            "name": details.get("name"),
            "start_time": details.get("start_time"),
            "end_time": details.get("end_time"),
            "timezone": details.get("timezone"),
        },
        "links": {
            "cancel_url": invitee.get("cancel_url"),
            "reschedule_url": invitee.get("reschedule_url"),
        },
    }

    event_type = body.get("event")
    return InboundEvent(
        source="calendly",
        actor_id=format_phone_number(raw_phone, default_country)
        if isinstance(raw_phone, str)
        else None,
        event_type=event_type if isinstance(event_type, str) else None,
        content=str(invitee.get("name") or "").strip(),
        message_id=invitee.get("uri"),
        metadata=metadata,
    )


def validate_calendly_event(
    event: InboundEvent,
    supported_events: Collection[str],
) -> str | None:
    """Checa campos mínimos e allow-list de tipos de evento.

    Returns:
        Motivo do descarte, ou None se o evento deve ser despachado.
    """
    if not event.event_type or not event.content:
        return "insufficient_data"
    if event.event_type not in supported_events:
        return "unsupported_event"
    return None
