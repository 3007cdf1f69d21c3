"""Gerenciamento de correlation_id para rastreamento de webhooks.

O correlation_id é definido na rota do webhook, herdado pelas tasks em
background (ContextVar é copiado em asyncio.create_task) e injetado em logs.

Uso:
    token = set_correlation_id(resolve_correlation_id(request.headers))
    try:
        ...
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Headers aceitos como correlation_id, em ordem de preferência
_CORRELATION_HEADERS = ("x-correlation-id", "i-twilio-idempotency-token", "x-request-id")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or generate_correlation_id()
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


def resolve_correlation_id(headers: Mapping[str, str]) -> str:
    """Escolhe correlation_id a partir dos headers do request.

    Usa o primeiro header conhecido presente; gera um novo ID caso nenhum
    esteja disponível.
    """
    for name in _CORRELATION_HEADERS:
        value = headers.get(name)
        if value:
            return value[:128]
    return generate_correlation_id()
