"""Exceções de domínio para falhas recuperáveis de infraestrutura."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""


class ExchangeStoreError(InfrastructureError):
    """Falha ao ler ou gravar histórico de trocas persistido."""
