"""Validação de assinatura X-Hook-Signature (Calendly).

Formato: ``sha256=<hex(HMAC-SHA256(signing_key, raw_body))>``.
"""

from __future__ import annotations

import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-hook-signature"
SIGNATURE_PREFIX = "sha256="
_LOGGED_SIGNATURE_CHARS = 10


def compute_calendly_signature(raw_body: bytes, signing_key: str) -> str:
    """Calcula a assinatura esperada (com prefixo)."""
    digest = hmac.new(signing_key.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def validate_calendly_signature(
    raw_body: bytes,
    signature: str | None,
    signing_key: str,
    *,
    enabled: bool = True,
) -> bool:
    """Valida assinatura de webhook Calendly em tempo constante.

    Args:
        raw_body: Corpo bruto do request (bytes exatamente como recebidos)
        signature: Valor do header X-Hook-Signature
        signing_key: Chave de assinatura do webhook
        enabled: False desabilita a validação explicitamente

    Returns:
        True se válida ou validação desabilitada; False caso contrário.
    """
    if not enabled:
        logger.warning("calendly_signature_validation_disabled")
        return True

    if not signature:
        logger.warning(
            "webhook_signature_missing",
            extra={"source": "calendly", "security_event": True},
        )
        return False

    if not signature.startswith(SIGNATURE_PREFIX):
        logger.warning(
            "webhook_signature_invalid",
            extra={
                "source": "calendly",
                "security_event": True,
                "reason": "missing_prefix",
            },
        )
        return False

    try:
        expected = compute_calendly_signature(raw_body, signing_key)
        valid = hmac.compare_digest(expected.encode("ascii"), signature.encode("ascii"))
    except (TypeError, ValueError, UnicodeError) as exc:
        logger.warning(
            "webhook_signature_error",
            extra={
                "source": "calendly",
                "security_event": True,
                "error_type": type(exc).__name__,
            },
        )
        return False

    if not valid:
        received = signature[len(SIGNATURE_PREFIX):]
        logger.warning(
            "webhook_signature_invalid",
            extra={
                "source": "calendly",
                "security_event": True,
                "received_signature": received[:_LOGGED_SIGNATURE_CHARS] + "...",
            },
        )
    return valid
