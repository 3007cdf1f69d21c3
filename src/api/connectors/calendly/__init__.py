"""Connector Calendly: validação de assinatura de webhook."""

from .signature import (
    SIGNATURE_HEADER,
    SIGNATURE_PREFIX,
    compute_calendly_signature,
    validate_calendly_signature,
)

__all__ = [
    "SIGNATURE_HEADER",
    "SIGNATURE_PREFIX",
    "compute_calendly_signature",
    "validate_calendly_signature",
]
