"""Protocolo do store persistente de trocas.

Contrato consumido pelo contexto de conversação (recarga em cache miss)
e pelos use cases (auditoria após cada troca/evento).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.domain.records import ExchangeRecord, SchedulingEventRecord


class ExchangeStoreProtocol(ABC):
    """Contrato para histórico persistente de trocas por cliente.

    Invariantes:
        - Chaveado pelo telefone E.164 do cliente
        - Leituras retornam as trocas mais recentes primeiro
        - Erros de IO são levantados como ExchangeStoreError
    """

    @abstractmethod
    async def save_exchange(self, record: ExchangeRecord) -> None:
        """Persiste uma troca cliente → assistente.

        Raises:
            ExchangeStoreError: Erro de persistência
        """

    @abstractmethod
    async def get_recent_exchanges(
        self,
        phone_number: str,
        *,
        limit: int = 10,
    ) -> Sequence[ExchangeRecord]:
        """Recupera as últimas trocas de um cliente (mais recentes primeiro).

        Raises:
            ExchangeStoreError: Erro de leitura
        """

    @abstractmethod
    async def get_recent_conversations(self, *, limit: int = 100) -> Sequence[ExchangeRecord]:
        """Recupera as trocas mais recentes de todos os clientes.

        Usado pela listagem administrativa para completar as conversas
        que já saíram do cache.

        Raises:
            ExchangeStoreError: Erro de leitura
        """

    @abstractmethod
    async def save_scheduling_event(self, record: SchedulingEventRecord) -> None:
        """Persiste auditoria de evento de agendamento.

        Raises:
            ExchangeStoreError: Erro de persistência
        """
