"""Taxonomia fechada de erros de entrega (Twilio).

Cada código/status do provedor mapeia para exatamente uma categoria.
Códigos desconhecidos caem em TRANSIENT (retry seguro).
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.protocols.messaging_transport import TransportError


class DeliveryErrorKind(StrEnum):
    """Categorias de falha de entrega outbound."""

    INVALID_RECIPIENT = "invalid_recipient"
    OPT_OUT = "opt_out"
    CONTENT_FILTERED = "content_filtered"
    UNREGISTERED = "unregistered"
    UPSTREAM_RATE_LIMIT = "upstream_rate_limit"
    UNCONFIRMED = "unconfirmed"
    TRANSIENT = "transient"
    INVALID_BODY = "invalid_body"
    RATE_LIMITED = "rate_limited"

    @property
    def is_retryable(self) -> bool:
        """Somente falhas transitórias são elegíveis a retry."""
        return self is DeliveryErrorKind.TRANSIENT


# Códigos de erro Twilio → categoria
_CODE_MAP: dict[int, DeliveryErrorKind] = {
    21211: DeliveryErrorKind.INVALID_RECIPIENT,
    21408: DeliveryErrorKind.OPT_OUT,
    21610: DeliveryErrorKind.CONTENT_FILTERED,
    21614: DeliveryErrorKind.UNREGISTERED,
    63007: DeliveryErrorKind.UNREGISTERED,
}

_USER_MESSAGES: dict[DeliveryErrorKind, str] = {
    DeliveryErrorKind.INVALID_RECIPIENT: "Número de teléfono inválido",
    DeliveryErrorKind.OPT_OUT: "El usuario ha optado por no recibir mensajes",
    DeliveryErrorKind.CONTENT_FILTERED: "Mensaje bloqueado por filtros de contenido",
    DeliveryErrorKind.UNREGISTERED: "El número no está registrado en WhatsApp",
    DeliveryErrorKind.UPSTREAM_RATE_LIMIT: "Límite de velocidad de Twilio excedido",
    DeliveryErrorKind.UNCONFIRMED: "Twilio aceptó el mensaje sin devolver su identificador",
    DeliveryErrorKind.TRANSIENT: "Error temporal del servicio, intenta más tarde",
    DeliveryErrorKind.INVALID_BODY: "El contenido del mensaje no es válido",
    DeliveryErrorKind.RATE_LIMITED: "Demasiados mensajes para este número, intenta más tarde",
}


def classify_provider_error(
    code: int | None,
    status_code: int | None,
) -> DeliveryErrorKind:
    """Classifica erro do provedor pela tabela código → categoria.

    Ordem: código Twilio conhecido > status 2xx (aceito sem SID, não repete)
    > status 429 > demais (transitório).
    """
    if code is not None and code in _CODE_MAP:
        return _CODE_MAP[code]
    if status_code is not None and 200 <= status_code < 300:
        return DeliveryErrorKind.UNCONFIRMED
    if status_code == 429:
        return DeliveryErrorKind.UPSTREAM_RATE_LIMIT
    return DeliveryErrorKind.TRANSIENT


def classify_transport_error(exc: TransportError) -> DeliveryErrorKind:
    """Classifica um TransportError levantado pelo transporte."""
    return classify_provider_error(exc.code, exc.status_code)


def user_message_for(kind: DeliveryErrorKind) -> str:
    """Mensagem apresentável ao operador/usuário para a categoria."""
    return _USER_MESSAGES[kind]
