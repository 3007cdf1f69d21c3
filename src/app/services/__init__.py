"""Serviços de aplicação.

Unidades reutilizáveis de orquestração (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.conversation_context import ConversationContextStore
from app.services.maintenance import MaintenanceScheduler, SweepJob
from app.services.outbound_delivery import (
    DeliveryResult,
    OutboundDeliveryService,
    OutboundMessage,
)
from app.services.rate_limiter import RateLimiter
from app.services.response_cache import ResponseCache
from app.services.response_generation import GenerationOptions, GenerativeResponseService

__all__ = [
    "ConversationContextStore",
    "DeliveryResult",
    "GenerationOptions",
    "GenerativeResponseService",
    "MaintenanceScheduler",
    "OutboundDeliveryService",
    "OutboundMessage",
    "RateLimiter",
    "ResponseCache",
    "SweepJob",
]
