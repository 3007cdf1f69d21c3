"""Normalizer Calendly: webhook JSON → InboundEvent."""

from .extractor import CalendlyPayloadError, extract_calendly_event, validate_calendly_event

__all__ = [
    "CalendlyPayloadError",
    "extract_calendly_event",
    "validate_calendly_event",
]
