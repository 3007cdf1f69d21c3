"""Protocolo de dedupe de eventos inbound.

Interface leve (ABC) dependida pelo controller de ingestão.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AsyncDedupeProtocol(ABC):
    """Contrato assíncrono para stores de deduplicação.

    Contrato de keys:
        IDs opacos do provedor (ex.: MessageSid). Nunca PII.
    """

    @abstractmethod
    async def seen(self, key: str, ttl: int = 3600) -> bool:
        """Verifica e marca a chave atomicamente.

        Args:
            key: Chave única (ex.: MessageSid)
            ttl: TTL da marca em segundos

        Returns:
            True se a chave já tinha sido vista (duplicado); False se nova.
        """
