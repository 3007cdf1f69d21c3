"""Stores: implementações concretas de persistência.

Módulos disponíveis:
    - firestore_exchange_store: Histórico de trocas/eventos no Firestore
    - redis_dedupe_store: Store de dedupe usando Redis
    - memory_stores: Stores em memória para desenvolvimento/testes
"""

from __future__ import annotations

from app.infra.stores.firestore_exchange_store import FirestoreExchangeStore
from app.infra.stores.memory_stores import MemoryDedupeStore, MemoryExchangeStore
from app.infra.stores.redis_dedupe_store import RedisDedupeStore

__all__ = [
    # Firestore
    "FirestoreExchangeStore",
    # Memory (dev/test)
    "MemoryDedupeStore",
    "MemoryExchangeStore",
    # Redis
    "RedisDedupeStore",
]
