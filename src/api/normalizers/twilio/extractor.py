"""Extrator de webhooks Twilio WhatsApp (form-encoded).

Estrutura típica:
- From/To: ``whatsapp:+34600000001``
- Body, MessageSid (ou SmsMessageSid), MessageType, ProfileName
- NumMedia, MediaUrl0, MediaContentType0, MediaSize0
- Latitude, Longitude, Address (mensagens de localização)

Não faz validação de negócio - apenas extração estrutural.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.domain.inbound_event import InboundEvent
from utils.phone import format_phone_number, strip_channel_prefix

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

MESSAGE_EVENT_TYPE = "message"


def _to_int(value: str | None) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


def _extract_media(params: Mapping[str, str]) -> dict[str, Any] | None:
    if _to_int(params.get("NumMedia")) <= 0:
        return None
    return {
        "url": params.get("MediaUrl0"),
        "content_type": params.get("MediaContentType0"),
        "size": _to_int(params.get("MediaSize0")) or None,
    }


def _extract_location(params: Mapping[str, str]) -> dict[str, Any] | None:
    latitude = params.get("Latitude")
    longitude = params.get("Longitude")
    if not latitude or not longitude:
        return None
    return {
        "latitude": latitude,
        "longitude": longitude,
        "address": params.get("Address"),
    }


def extract_twilio_event(
    params: Mapping[str, str],
    *,
    default_country: str = "+34",
) -> InboundEvent:
    """Converte parâmetros do webhook Twilio em InboundEvent.

    Args:
        params: Campos do formulário recebido
        default_country: País aplicado a números sem código

    Returns:
        InboundEvent com actor_id em E.164 (None se o número for inválido).
    """
    raw_from = params.get("From", "")
    media = _extract_media(params)
    location = _extract_location(params)
    message_type = params.get("MessageType") or (
        "media" if media else "location" if location else "text"
    )

    metadata: dict[str, Any] = {
        "to": format_phone_number(params.get("To"), default_country)
        or strip_channel_prefix(params.get("To", "")),
        "message_type": message_type,
        "profile_name": params.get("ProfileName"),
        "num_media": _to_int(params.get("NumMedia")),
        "has_media": media is not None,
    }
    if media:
        metadata["media"] = media
    if location:
        metadata["location"] = location

    return InboundEvent(
        source="twilio",
        actor_id=format_phone_number(raw_from, default_country),
        event_type=MESSAGE_EVENT_TYPE,
        content=(params.get("Body") or "").strip(),
        message_id=params.get("MessageSid") or params.get("SmsMessageSid"),
        metadata=metadata,
    )


def validate_twilio_event(event: InboundEvent, bot_number: str | None = None) -> str | None:
    """Checa campos mínimos do evento de mensagem.

    Returns:
        Motivo do descarte, ou None se o evento deve ser despachado.
    """
    if not event.actor_id:
        return "missing_actor"
    if not event.content:
        return "empty_content"
    if bot_number and event.actor_id == bot_number:
        return "own_number"
    return None
