"""Normalização de números de telefone para E.164.

Usado como identificador de ator (chave do contexto de conversa) e como
destinatário de envios outbound.

Regras:
- Remove prefixo de canal (``whatsapp:``), espaços e pontuação
- Converte prefixo internacional ``00`` em ``+``
- Números nacionais sem código recebem o país padrão
- Corrige código de país duplicado (ex.: ``+3434...``)
"""

from __future__ import annotations

import re
from typing import Final

DEFAULT_COUNTRY_CODE: Final[str] = "+34"
CHANNEL_PREFIX: Final[str] = "whatsapp:"

_NON_DIGITS = re.compile(r"[^\d+]")
_GENERIC_E164 = re.compile(r"^\+\d{7,15}$")

# Validação específica por país (demais países usam regra genérica)
_COUNTRY_PATTERNS: Final[dict[str, re.Pattern[str]]] = {
    "+34": re.compile(r"^\+34[6-9]\d{8}$"),
    "+1": re.compile(r"^\+1\d{10}$"),
    "+52": re.compile(r"^\+52\d{10}$"),
    "+33": re.compile(r"^\+33[1-9]\d{8}$"),
}


def strip_channel_prefix(raw: str) -> str:
    """Remove o prefixo de canal (ex.: ``whatsapp:+34...``)."""
    value = raw.strip()
    if value.lower().startswith(CHANNEL_PREFIX):
        return value[len(CHANNEL_PREFIX):]
    return value


def format_phone_number(
    raw: str | None,
    default_country: str = DEFAULT_COUNTRY_CODE,
) -> str | None:
    """Converte entrada livre para E.164.

    Args:
        raw: Número como recebido (pode conter prefixo de canal).
        default_country: Código de país aplicado a números nacionais.

    Returns:
        Número em E.164 ou None se não for possível normalizar.
    """
    if not raw:
        return None

    cleaned = _NON_DIGITS.sub("", strip_channel_prefix(raw))
    if not cleaned:
        return None

    # "+" só é válido na primeira posição
    has_plus = cleaned.startswith("+")
    digits = cleaned.replace("+", "")
    if not digits:
        return None

    if has_plus:
        candidate = f"+{digits}"
    elif digits.startswith("00"):
        candidate = f"+{digits[2:]}"
    elif digits.startswith(default_country.lstrip("+")) and len(digits) > 9:
        candidate = f"+{digits}"
    else:
        candidate = f"{default_country}{digits}"

    candidate = _collapse_duplicated_country(candidate, default_country)

    if not is_valid_phone_number(candidate):
        return None
    return candidate


def _collapse_duplicated_country(number: str, country: str) -> str:
    duplicated = country + country.lstrip("+")
    if number.startswith(duplicated) and not is_valid_phone_number(number):
        return country + number[len(duplicated):]
    return number


def is_valid_phone_number(number: str) -> bool:
    """Valida número E.164 com regra do país quando conhecida."""
    for prefix, pattern in _COUNTRY_PATTERNS.items():
        if number.startswith(prefix):
            return bool(pattern.match(number))
    return bool(_GENERIC_E164.match(number))


def country_code_of(number: str) -> str | None:
    """Retorna o código de país conhecido do número (ou None)."""
    for prefix in _COUNTRY_PATTERNS:
        if number.startswith(prefix):
            return prefix
    return None


def mask_phone(number: str | None) -> str:
    """Mascara telefone para logs (mantém 4 últimos dígitos)."""
    if not number:
        return ""
    return f"***{number[-4:]}"
