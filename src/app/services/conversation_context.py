"""Store de contexto de conversação por cliente (cache com TTL deslizante).

Responsabilidades:
- Manter as mensagens recentes de cada cliente em memória
- Recarregar do store persistente em cache miss (cold reload)
- Expirar entradas inativas (lazy em get/append, ou por varredura periódica)
- Operações administrativas: limpar, exportar, listar conversas e analisar padrões

Concorrência:
    Cada cliente tem um asyncio.Lock próprio usado por get() e append().
    A recarga suspende (IO) dentro do lock, então dois appends concorrentes
    para o mesmo cliente nunca perdem atualização. Não há lock global
    entre clientes. O lock de um cliente conta quem o segura ou espera e só
    é descartado quando essa contagem chega a zero; evict_expired() não mexe
    nos locks.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.conversation import ConversationMessage
from utils.phone import mask_phone

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Mapping, Sequence

    from app.domain.conversation import MessageRole
    from app.domain.records import ExchangeRecord
    from app.protocols.exchange_store import ExchangeStoreProtocol

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGES = 50
DEFAULT_RETENTION_SECONDS = 24 * 60 * 60
DEFAULT_RELOAD_LIMIT = 10
DEFAULT_SESSION_TIMEOUT_SECONDS = 2 * 60 * 60
ANALYSIS_MESSAGE_LIMIT = 100
_TOPIC_MIN_WORD_LENGTH = 4
_TOPIC_COUNT = 5


@dataclass(slots=True)
class SessionMetadata:
    """Metadados da sessão de um cliente."""

    started_at: datetime
    message_count: int = 0
    last_activity: datetime | None = None


@dataclass(slots=True)
class _ContextEntry:
    messages: list[ConversationMessage]
    expires_at: float
    last_accessed: float
    session: SessionMetadata


@dataclass(slots=True)
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConversationContextStore:
    """Cache de contexto de conversação com recarga do store persistente.

    Args:
        exchange_store: Store persistente usado na recarga (None = sem recarga)
        max_messages: Máximo de mensagens mantidas por cliente
        retention_seconds: Janela de retenção, renovada a cada acesso
        reload_limit: Trocas buscadas no store em cache miss
        session_timeout_seconds: Inatividade após a qual a conversa não é "ativa"
        clock: Relógio monotônico (injetável em testes)
        now: Relógio de parede para timestamps de mensagens
    """

    def __init__(
        self,
        exchange_store: ExchangeStoreProtocol | None = None,
        *,
        max_messages: int = DEFAULT_MAX_MESSAGES,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        reload_limit: int = DEFAULT_RELOAD_LIMIT,
        session_timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_messages < 1:
            raise ValueError("max_messages deve ser >= 1")
        self._exchange_store = exchange_store
        self._max_messages = max_messages
        self._retention_seconds = retention_seconds
        self._reload_limit = reload_limit
        self._session_timeout_seconds = session_timeout_seconds
        self._clock = clock
        self._now = now
        self._entries: dict[str, _ContextEntry] = {}
        self._locks: dict[str, _KeyLock] = {}

    # ──────────────────────────────────────────────────────────────
    # Hot path
    # ──────────────────────────────────────────────────────────────

    async def get(self, customer_id: str, limit: int | None = None) -> list[ConversationMessage]:
        """Retorna mensagens do cliente (mais recente por último).

        Cache hit retorna fatia da entrada viva; cache miss recarrega do
        store persistente e popula uma entrada nova. Falha na recarga
        retorna lista vazia e não popula o cache.
        """
        async with self._locked(customer_id):
            now = self._clock()
            entry = self._live_entry(customer_id, now)
            if entry is None:
                messages = await self._reload(customer_id)
                if messages is None:
                    return []
                entry = self._new_entry(messages, now)
                entry.session.message_count = len(entry.messages)
                self._entries[customer_id] = entry
                logger.info(
                    "conversation_context_reloaded",
                    extra={
                        "customer": mask_phone(customer_id),
                        "message_count": len(entry.messages),
                    },
                )
            else:
                self._touch(entry, now)
                logger.debug(
                    "conversation_context_hit",
                    extra={
                        "customer": mask_phone(customer_id),
                        "message_count": len(entry.messages),
                    },
                )
            return _tail(entry.messages, limit)

    async def append(
        self,
        customer_id: str,
        role: MessageRole,
        content: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Adiciona mensagem ao contexto do cliente.

        Cria a entrada se ausente/expirada, descarta as mais antigas acima
        do limite e renova a expiração. Nunca levanta exceção.
        """
        try:
            async with self._locked(customer_id):
                now = self._clock()
                entry = self._live_entry(customer_id, now)
                if entry is None:
                    entry = self._new_entry([], now)
                    self._entries[customer_id] = entry

                entry.messages.append(self._build_message(role, content, metadata or {}))
                overflow = len(entry.messages) - self._max_messages
                if overflow > 0:
                    del entry.messages[:overflow]

                self._touch(entry, now)
                entry.session.message_count += 1
                entry.session.last_activity = self._now()

                logger.debug(
                    "conversation_message_appended",
                    extra={
                        "customer": mask_phone(customer_id),
                        "role": role,
                        "content_length": len(content),
                        "message_count": len(entry.messages),
                    },
                )
        except Exception as exc:
            logger.error(
                "conversation_append_failed",
                extra={
                    "customer": mask_phone(customer_id),
                    "role": role,
                    "error_type": type(exc).__name__,
                },
            )

    # ──────────────────────────────────────────────────────────────
    # Manutenção
    # ──────────────────────────────────────────────────────────────

    def evict_expired(self) -> int:
        """Remove entradas expiradas (varredura periódica).

        Não suspende: seguro sob get/append concorrentes.

        Returns:
            Quantidade de entradas removidas.
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(
                "conversation_contexts_evicted",
                extra={"evicted": len(expired), "remaining": len(self._entries)},
            )
        return len(expired)

    # ──────────────────────────────────────────────────────────────
    # Administração (fora do hot path)
    # ──────────────────────────────────────────────────────────────

    async def clear(self, customer_id: str) -> bool:
        """Remove o contexto de um cliente. Retorna True se existia."""
        async with self._locked(customer_id):
            removed = self._entries.pop(customer_id, None) is not None
        logger.info(
            "conversation_context_cleared",
            extra={"customer": mask_phone(customer_id), "removed": removed},
        )
        return removed

    async def export_all(self, customer_id: str | None = None) -> dict[str, Any]:
        """Exporta snapshot dos contextos vivos (cópias).

        Com ``customer_id`` exporta apenas esse cliente, recarregando do
        store persistente se ele não estiver em cache.
        """
        if customer_id is not None:
            await self.get(customer_id)
            keys = [customer_id]
        else:
            keys = list(self._entries)

        now = self._clock()
        contexts: dict[str, Any] = {}
        for key in keys:
            entry = self._entries.get(key)
            if entry is None or now > entry.expires_at:
                continue
            contexts[key] = {
                "messages": [message.to_dict() for message in entry.messages],
                "expires_in_seconds": round(entry.expires_at - now, 1),
                "session": _session_dict(entry.session),
            }
        logger.info(
            "conversation_contexts_exported",
            extra={
                "customer": mask_phone(customer_id) if customer_id else "all",
                "total_contexts": len(contexts),
            },
        )
        return {
            "exported_at": self._now().isoformat(),
            "total_contexts": len(contexts),
            "contexts": contexts,
        }

    async def active_conversations(
        self,
        *,
        limit: int = 50,
        min_messages: int = 1,
    ) -> list[dict[str, Any]]:
        """Lista conversas, da atividade mais recente para a mais antiga.

        Se o cache tiver menos de ``limit`` conversas, completa com os
        clientes das trocas recentes do store persistente
        (``is_active=False``, ``session_start=None``).
        """
        now = self._clock()
        rows: list[tuple[float, dict[str, Any]]] = []
        cached: set[str] = set()
        for key, entry in list(self._entries.items()):
            if now > entry.expires_at:
                continue
            cached.add(key)
            if len(entry.messages) < min_messages:
                continue
            rows.append(
                (
                    entry.last_accessed,
                    {
                        "phone_number": key,
                        "message_count": len(entry.messages),
                        "last_activity": _isoformat(entry.session.last_activity),
                        "session_start": entry.session.started_at.isoformat(),
                        "is_active": now - entry.last_accessed < self._session_timeout_seconds,
                    },
                )
            )
        rows.sort(key=lambda row: row[0], reverse=True)
        conversations = [row for _, row in rows[:limit]]

        if len(conversations) < limit and self._exchange_store is not None:
            stored = await self._stored_conversations(limit * 2, min_messages)
            conversations.extend(row for row in stored if row["phone_number"] not in cached)
        return conversations[:limit]

    async def analyze_patterns(self, customer_id: str) -> dict[str, Any]:
        """Padrões da conversa de um cliente.

        Considera as últimas ``ANALYSIS_MESSAGE_LIMIT`` mensagens. Tempos em
        segundos; o tempo de resposta médio usa apenas pares consecutivos
        cliente → assistente. ``topics`` são as palavras mais frequentes
        das mensagens do cliente.
        """
        messages = await self.get(customer_id, ANALYSIS_MESSAGE_LIMIT)
        customer_messages = [message for message in messages if message.role == "customer"]
        if not messages:
            return {
                "total_messages": 0,
                "customer_messages": 0,
                "assistant_messages": 0,
                "average_message_length": 0,
                "conversation_duration_seconds": 0.0,
                "average_response_seconds": 0.0,
                "topics": [],
            }

        duration = (messages[-1].timestamp - messages[0].timestamp).total_seconds()
        response_times = [
            (current.timestamp - previous.timestamp).total_seconds()
            for previous, current in zip(messages, messages[1:], strict=False)
            if previous.role == "customer" and current.role == "assistant"
        ]
        words = Counter(
            word
            for message in customer_messages
            for word in message.content.lower().split()
            if len(word) >= _TOPIC_MIN_WORD_LENGTH
        )
        total_length = sum(len(message.content) for message in messages)
        return {
            "total_messages": len(messages),
            "customer_messages": len(customer_messages),
            "assistant_messages": len(messages) - len(customer_messages),
            "average_message_length": round(total_length / len(messages)),
            "conversation_duration_seconds": round(duration, 1),
            "average_response_seconds": (
                round(sum(response_times) / len(response_times), 1) if response_times else 0.0
            ),
            "topics": [
                {"word": word, "count": count} for word, count in words.most_common(_TOPIC_COUNT)
            ],
        }

    def stats(self) -> dict[str, Any]:
        """Estatísticas do cache de contexto."""
        now = self._clock()
        live = [entry for entry in self._entries.values() if now <= entry.expires_at]
        return {
            "total_contexts": len(self._entries),
            "active_contexts": len(live),
            "total_messages": sum(len(entry.messages) for entry in live),
            "max_messages": self._max_messages,
            "retention_seconds": self._retention_seconds,
        }

    # ──────────────────────────────────────────────────────────────
    # Internos
    # ──────────────────────────────────────────────────────────────

    @asynccontextmanager
    async def _locked(self, customer_id: str) -> AsyncIterator[None]:
        key_lock = self._locks.get(customer_id)
        if key_lock is None:
            key_lock = _KeyLock()
            self._locks[customer_id] = key_lock
        key_lock.users += 1
        try:
            async with key_lock.lock:
                yield
        finally:
            key_lock.users -= 1
            if key_lock.users == 0 and self._locks.get(customer_id) is key_lock:
                del self._locks[customer_id]

    def _live_entry(self, customer_id: str, now: float) -> _ContextEntry | None:
        entry = self._entries.get(customer_id)
        if entry is None:
            return None
        if now > entry.expires_at:
            del self._entries[customer_id]
            return None
        return entry

    def _new_entry(self, messages: list[ConversationMessage], now: float) -> _ContextEntry:
        return _ContextEntry(
            messages=messages[-self._max_messages:],
            expires_at=now + self._retention_seconds,
            last_accessed=now,
            session=SessionMetadata(started_at=self._now(), last_activity=self._now()),
        )

    def _touch(self, entry: _ContextEntry, now: float) -> None:
        entry.last_accessed = now
        entry.expires_at = now + self._retention_seconds

    def _build_message(
        self,
        role: MessageRole,
        content: str,
        metadata: Mapping[str, Any],
    ) -> ConversationMessage:
        return ConversationMessage(
            role=role,
            content=content,
            timestamp=self._now(),
            message_id=metadata.get("message_id"),
            has_media=bool(metadata.get("has_media", False)),
            manual=bool(metadata.get("manual", False)),
            sent_by=metadata.get("sent_by"),
        )

    async def _reload(self, customer_id: str) -> list[ConversationMessage] | None:
        if self._exchange_store is None or self._reload_limit <= 0:
            return []
        try:
            records = await self._exchange_store.get_recent_exchanges(
                customer_id,
                limit=self._reload_limit,
            )
        except Exception as exc:
            logger.error(
                "conversation_context_reload_failed",
                extra={
                    "customer": mask_phone(customer_id),
                    "error_type": type(exc).__name__,
                },
            )
            return None
        return exchanges_to_messages(records)

    async def _stored_conversations(self, fetch_limit: int, min_messages: int) -> list[dict[str, Any]]:
        if self._exchange_store is None:
            return []
        try:
            records = await self._exchange_store.get_recent_conversations(limit=fetch_limit)
        except Exception as exc:
            logger.error(
                "active_conversations_store_failed",
                extra={"error_type": type(exc).__name__},
            )
            return []

        groups: dict[str, dict[str, Any]] = {}
        for record in records:
            group = groups.get(record.phone_number)
            if group is None:
                group = {
                    "phone_number": record.phone_number,
                    "message_count": 0,
                    "last_activity": record.processed_at.isoformat(),
                    "session_start": None,
                    "is_active": False,
                }
                groups[record.phone_number] = group
            group["message_count"] += int(bool(record.message_in)) + int(bool(record.message_out))
        return [group for group in groups.values() if group["message_count"] >= min_messages]


def exchanges_to_messages(records: Sequence[ExchangeRecord]) -> list[ConversationMessage]:
    """Reconstrói a ordem intercalada a partir de trocas (mais recentes primeiro)."""
    messages: list[ConversationMessage] = []
    for record in reversed(records):
        if record.message_in:
            messages.append(
                ConversationMessage(
                    role="customer",
                    content=record.message_in,
                    timestamp=record.processed_at,
                    message_id=record.message_in_id,
                    has_media=record.has_media,
                )
            )
        if record.message_out:
            messages.append(
                ConversationMessage(
                    role="assistant",
                    content=record.message_out,
                    timestamp=record.processed_at,
                    message_id=record.message_out_id,
                )
            )
    return messages


def _tail(messages: list[ConversationMessage], limit: int | None) -> list[ConversationMessage]:
    if limit is None:
        return list(messages)
    if limit <= 0:
        return []
    return messages[-limit:]


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _session_dict(session: SessionMetadata) -> dict[str, Any]:
    return {
        "started_at": session.started_at.isoformat(),
        "message_count": session.message_count,
        "last_activity": _isoformat(session.last_activity),
    }
