"""Connector Twilio: assinatura de webhook, envio REST e taxonomia de erros."""

from .errors import DeliveryErrorKind, classify_transport_error, user_message_for
from .http_client import TwilioMessagingClient
from .signature import (
    SIGNATURE_HEADER,
    build_signed_url,
    compute_twilio_signature,
    validate_twilio_signature,
)

__all__ = [
    "SIGNATURE_HEADER",
    "DeliveryErrorKind",
    "TwilioMessagingClient",
    "build_signed_url",
    "classify_transport_error",
    "compute_twilio_signature",
    "user_message_for",
    "validate_twilio_signature",
]
