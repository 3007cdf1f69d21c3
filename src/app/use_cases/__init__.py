"""Use cases da aplicação (orquestram serviços; sem IO direto)."""

from app.use_cases.process_inbound_message import (
    InboundMessageResult,
    ProcessInboundMessageUseCase,
)
from app.use_cases.process_scheduling_event import (
    ProcessSchedulingEventUseCase,
    SchedulingEventResult,
)
from app.use_cases.send_manual_message import SendManualMessageUseCase

__all__ = [
    "InboundMessageResult",
    "ProcessInboundMessageUseCase",
    "ProcessSchedulingEventUseCase",
    "SchedulingEventResult",
    "SendManualMessageUseCase",
]
