"""Settings de contexto de conversação.

Configurações do cache de contexto por cliente (TTL deslizante).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class ConversationSettings:
    """Configurações do contexto de conversação.

    Attributes:
        max_messages: Máximo de mensagens mantidas por cliente
        retention_seconds: Janela de retenção (renovada a cada acesso)
        reload_limit: Trocas recarregadas do store persistente em cache miss
        cleanup_interval_seconds: Intervalo da varredura de expirados
        prompt_history_messages: Mensagens de contexto incluídas no prompt
    """

    max_messages: int = 50
    retention_seconds: int = 86400  # 24h
    reload_limit: int = 10
    cleanup_interval_seconds: int = 1800  # 30 min
    prompt_history_messages: int = 5

    def validate(self) -> list[str]:
        """Valida configurações de conversação.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.max_messages < 1:
            errors.append("CONTEXT_MAX_MESSAGES deve ser >= 1")

        if self.retention_seconds <= 0:
            errors.append("CONTEXT_RETENTION_SECONDS deve ser > 0")

        if self.reload_limit < 0:
            errors.append("CONTEXT_RELOAD_LIMIT deve ser >= 0")

        if self.cleanup_interval_seconds <= 0:
            errors.append("CONTEXT_CLEANUP_INTERVAL_SECONDS deve ser > 0")

        return errors


def _load_conversation_from_env() -> ConversationSettings:
    """Carrega ConversationSettings de variáveis de ambiente."""
    return ConversationSettings(
        max_messages=int(os.getenv("CONTEXT_MAX_MESSAGES", "50")),
        retention_seconds=int(os.getenv("CONTEXT_RETENTION_SECONDS", "86400")),
        reload_limit=int(os.getenv("CONTEXT_RELOAD_LIMIT", "10")),
        cleanup_interval_seconds=int(os.getenv("CONTEXT_CLEANUP_INTERVAL_SECONDS", "1800")),
        prompt_history_messages=int(os.getenv("CONTEXT_PROMPT_HISTORY", "5")),
    )


@lru_cache(maxsize=1)
def get_conversation_settings() -> ConversationSettings:
    """Retorna instância cacheada de ConversationSettings."""
    return _load_conversation_from_env()
