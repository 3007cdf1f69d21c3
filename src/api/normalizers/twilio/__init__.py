"""Normalizer Twilio: webhook form-encoded → InboundEvent."""

from .extractor import MESSAGE_EVENT_TYPE, extract_twilio_event, validate_twilio_event

__all__ = [
    "MESSAGE_EVENT_TYPE",
    "extract_twilio_event",
    "validate_twilio_event",
]
