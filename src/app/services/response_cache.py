"""Cache de respostas geradas (TTL + capacidade com remoção do mais antigo).

Chave = fingerprint SHA-256 do modelo + prompt sanitizado completo.
Operações não suspendem: seguras sob tasks concorrentes no event loop.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_MAX_ENTRIES = 100


@dataclass(frozen=True, slots=True)
class CachedResponse:
    """Resposta armazenada no cache."""

    text: str
    created_at: float


def fingerprint(prompt: str, model: str = "") -> str:
    """Gera chave de cache determinística para o prompt sanitizado."""
    material = f"{model}\x1f{prompt}".encode()
    return hashlib.sha256(material).hexdigest()


class ResponseCache:
    """Cache LRU-por-inserção com TTL para respostas do LLM.

    Args:
        ttl_seconds: Tempo de vida de cada entrada
        max_entries: Capacidade máxima (excedente remove o mais antigo)
        clock: Relógio monotônico (injetável em testes)
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries deve ser >= 1")
        self._ttl_seconds = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CachedResponse] = OrderedDict()
        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> float:
        """TTL configurado (usado como intervalo da varredura periódica)."""
        return self._ttl_seconds

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> str | None:
        """Retorna texto em cache ou None (entrada expirada conta como miss)."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if self._clock() - entry.created_at > self._ttl_seconds:
            del self._entries[key]
            self._misses += 1
            return None
        self._hits += 1
        return entry.text

    def put(self, key: str, text: str) -> None:
        """Armazena resposta, removendo as mais antigas acima da capacidade."""
        self._entries.pop(key, None)
        self._entries[key] = CachedResponse(text=text, created_at=self._clock())
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def evict_expired(self) -> int:
        """Remove entradas expiradas. Retorna quantas foram removidas."""
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if now - entry.created_at > self._ttl_seconds
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(
                "response_cache_evicted",
                extra={"evicted": len(expired), "remaining": len(self._entries)},
            )
        return len(expired)

    def clear(self) -> None:
        """Esvazia o cache."""
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Estatísticas do cache."""
        return {
            "size": len(self._entries),
            "max_entries": self._max_entries,
            "ttl_seconds": self._ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
        }
