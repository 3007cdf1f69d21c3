"""Protocolos e contratos do core da aplicação."""

from .dedupe import AsyncDedupeProtocol
from .exchange_store import ExchangeStoreProtocol
from .messaging_transport import MessagingTransportProtocol, TransportError
from .text_generator import (
    GenerationBackendError,
    GenerationError,
    GenerationResult,
    InvalidRequestError,
    QuotaExceededError,
    RateLimitedError,
    TextGeneratorProtocol,
    TokenUsage,
)

__all__ = [
    "AsyncDedupeProtocol",
    "ExchangeStoreProtocol",
    "GenerationBackendError",
    "GenerationError",
    "GenerationResult",
    "InvalidRequestError",
    "MessagingTransportProtocol",
    "QuotaExceededError",
    "RateLimitedError",
    "TextGeneratorProtocol",
    "TokenUsage",
    "TransportError",
]
