"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    ExchangeStoreError,
    InfrastructureError,
    RedisConnectionError,
)

__all__ = [
    "ExchangeStoreError",
    "InfrastructureError",
    "RedisConnectionError",
]
