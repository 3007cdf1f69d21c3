"""Redis Dedupe Store: deduplicação de webhooks inbound.

Usa SET NX EX (set if not exists) para check-and-mark atômico entre
processos e réplicas.

Contrato de Keys:
    As keys devem ser IDs opacos do provedor (ex.: MessageSid).
    NUNCA passar dados sensíveis (PII, telefones, emails) como key.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.protocols.dedupe import AsyncDedupeProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Prefixo para namespace de dedupe
DEDUPE_PREFIX = "dedupe:"


class RedisDedupeStore(AsyncDedupeProtocol):
    """Store de dedupe usando Redis assíncrono.

    Args:
        redis_client: Cliente redis.asyncio
        prefix: Namespace das chaves
    """

    def __init__(self, redis_client: AsyncRedis, *, prefix: str = DEDUPE_PREFIX) -> None:
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{self._prefix}{key}"

    async def seen(self, key: str, ttl: int = 3600) -> bool:
        """Verifica e marca chave atomicamente.

        Raises:
            RedisConnectionError: Falha de conexão/timeout
        """
        try:
            # SET NX retorna True se criou (novo), None se já existia (duplicado)
            was_set = await self._redis.set(self._key(key), "1", nx=True, ex=ttl)
        except Exception as exc:
            raise RedisConnectionError("Falha ao consultar dedupe no Redis") from exc
        is_duplicate = not was_set
        if is_duplicate:
            key_masked = key[:8] + "..." if len(key) > 8 else key
            logger.debug("dedupe_duplicate_detected", extra={"key": key_masked})
        return is_duplicate

    async def aclose(self) -> None:
        """Fecha a conexão Redis."""
        await self._redis.aclose()

    async def ping(self) -> bool:
        """Readiness: True se o Redis responde."""
        return bool(await self._redis.ping())
