"""Settings específicas de Calendly (eventos de agendamento)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

SUPPORTED_EVENTS: frozenset[str] = frozenset(
    {"invitee.created", "invitee.canceled", "invitee.rescheduled"}
)


@dataclass(frozen=True)
class CalendlySettings:
    """Configurações do webhook Calendly.

    Attributes:
        signing_key: Chave HMAC do webhook (X-Hook-Signature)
        validate_signature: Se a assinatura é exigida
        supported_events: Tipos de evento processados
    """

    signing_key: str = ""
    validate_signature: bool = True
    supported_events: frozenset[str] = SUPPORTED_EVENTS

    def validate(self) -> list[str]:
        """Valida configurações de Calendly.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.validate_signature and not self.signing_key:
            errors.append(
                "CALENDLY_SIGNING_KEY não configurado mas VALIDATE_CALENDLY_SIGNATURE=true"
            )

        return errors


def _load_calendly_from_env() -> CalendlySettings:
    """Carrega CalendlySettings de variáveis de ambiente."""
    return CalendlySettings(
        signing_key=os.getenv("CALENDLY_SIGNING_KEY", ""),
        validate_signature=os.getenv("VALIDATE_CALENDLY_SIGNATURE", "true").lower()
        in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_calendly_settings() -> CalendlySettings:
    """Retorna instância cacheada de CalendlySettings."""
    return _load_calendly_from_env()
