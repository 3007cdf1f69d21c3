"""Validação de assinatura X-Twilio-Signature.

Esquema do Twilio:
    base64(HMAC-SHA1(auth_token, url + concat(sorted(key + value))))

A URL precisa ser exatamente a que o Twilio chamou (esquema, host,
path e query). Atrás de proxy, usar X-Forwarded-Proto/Host ou a URL
pública configurada.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-twilio-signature"
_LOGGED_SIGNATURE_CHARS = 20


def compute_twilio_signature(
    url: str,
    params: Iterable[tuple[str, str]],
    auth_token: str,
) -> str:
    """Calcula a assinatura esperada para URL + parâmetros de formulário."""
    payload = url + "".join(f"{key}{value}" for key, value in sorted(params))
    digest = hmac.new(
        auth_token.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def validate_twilio_signature(
    url: str,
    params: Iterable[tuple[str, str]],
    signature: str | None,
    auth_token: str,
    *,
    enabled: bool = True,
) -> bool:
    """Valida assinatura de webhook Twilio em tempo constante.

    Args:
        url: URL completa chamada pelo Twilio
        params: Parâmetros do formulário (pares chave/valor)
        signature: Valor do header X-Twilio-Signature
        auth_token: Auth token da conta (secret HMAC)
        enabled: False desabilita a validação explicitamente

    Returns:
        True se válida ou validação desabilitada; False caso contrário.
    """
    if not enabled:
        logger.warning("twilio_signature_validation_disabled")
        return True

    if not signature:
        logger.warning(
            "webhook_signature_missing",
            extra={"source": "twilio", "security_event": True},
        )
        return False

    try:
        expected = compute_twilio_signature(url, params, auth_token)
        valid = hmac.compare_digest(expected.encode("ascii"), signature.encode("ascii"))
    except (TypeError, ValueError, UnicodeError) as exc:
        logger.warning(
            "webhook_signature_error",
            extra={
                "source": "twilio",
                "security_event": True,
                "error_type": type(exc).__name__,
            },
        )
        return False

    if not valid:
        logger.warning(
            "webhook_signature_invalid",
            extra={
                "source": "twilio",
                "security_event": True,
                "received_signature": signature[:_LOGGED_SIGNATURE_CHARS] + "...",
                "url": url,
            },
        )
    return valid


def build_signed_url(
    headers: Mapping[str, str],
    path: str,
    query: str = "",
    *,
    public_base_url: str = "",
    default_scheme: str = "https",
) -> str:
    """Reconstrói a URL original chamada pelo Twilio.

    Prioridade: URL pública configurada > X-Forwarded-Proto/Host > Host.
    """
    if public_base_url:
        base = public_base_url.rstrip("/")
    else:
        scheme = headers.get("x-forwarded-proto", default_scheme).split(",")[0].strip()
        host = headers.get("x-forwarded-host") or headers.get("host", "")
        base = f"{scheme}://{host}"
    url = f"{base}{path}"
    if query:
        url = f"{url}?{query}"
    return url
