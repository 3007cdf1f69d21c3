"""Normalizers por origem: conversão de payloads externos para InboundEvent.

Estrutura:
- twilio/: mensagens WhatsApp (form-encoded)
- calendly/: eventos de agendamento (JSON)

Cada origem tem seu próprio extractor, mantendo SRP.
"""

from .calendly import CalendlyPayloadError, extract_calendly_event, validate_calendly_event
from .twilio import extract_twilio_event, validate_twilio_event

__all__ = [
    "CalendlyPayloadError",
    "extract_calendly_event",
    "extract_twilio_event",
    "validate_calendly_event",
    "validate_twilio_event",
]
