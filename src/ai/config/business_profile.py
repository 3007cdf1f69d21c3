"""Loader do perfil do negócio.

Carrega nome, contatos e instruções do assistente do YAML para uso nos
prompts. Variáveis BUSINESS_* no ambiente sobrescrevem o arquivo.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_BUSINESS_PROFILE_PATH = Path(__file__).resolve().parents[1] / "contexts" / "business_profile.yaml"

_ENV_OVERRIDES = {
    "name": "BUSINESS_NAME",
    "phone": "BUSINESS_PHONE",
    "email": "BUSINESS_EMAIL",
    "address": "BUSINESS_ADDRESS",
    "booking_url": "BUSINESS_BOOKING_URL",
}


class BusinessProfileError(Exception):
    """Erro ao carregar perfil do negócio."""


@dataclass(frozen=True)
class BusinessProfile:
    """Dados do negócio injetados nos prompts."""

    name: str
    phone: str = ""
    email: str = ""
    address: str = ""
    booking_url: str = ""
    instructions: tuple[str, ...] = field(default_factory=tuple)


@lru_cache(maxsize=1)
def load_business_profile(path: str | None = None) -> BusinessProfile:
    """Carrega perfil do negócio do YAML (cached), aplicando overrides do ambiente."""
    data = _read_yaml(Path(path) if path else _BUSINESS_PROFILE_PATH)
    business = dict(data.get("business") or {})
    for key, env_name in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            business[key] = value

    instructions = (data.get("assistant") or {}).get("instructions") or []
    return BusinessProfile(
        name=str(business.get("name") or _FALLBACK_PROFILE["business"]["name"]),
        phone=str(business.get("phone") or ""),
        email=str(business.get("email") or ""),
        address=str(business.get("address") or ""),
        booking_url=str(business.get("booking_url") or ""),
        instructions=tuple(str(item) for item in instructions),
    )


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.warning("business_profile_not_found", extra={"path": str(path)})
        return _FALLBACK_PROFILE

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise BusinessProfileError("YAML deve ser um dicionário")
    except (yaml.YAMLError, BusinessProfileError) as exc:
        logger.error(
            "business_profile_parse_failed",
            extra={"path": str(path), "error": str(exc)},
        )
        return _FALLBACK_PROFILE
    return data


_FALLBACK_PROFILE: dict[str, Any] = {
    "business": {"name": "nuestro negocio"},
    "assistant": {
        "instructions": [
            "Responde en español de manera profesional, amigable y útil",
            "Si no puedes resolver algo, ofrece contactar directamente",
        ],
    },
}
