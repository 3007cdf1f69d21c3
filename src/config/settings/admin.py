"""Settings da API administrativa."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class AdminSettings:
    """Configurações da API administrativa.

    Attributes:
        api_token: Bearer token exigido nas rotas /admin (vazio = desabilitado)
    """

    api_token: str = ""

    @property
    def enabled(self) -> bool:
        """Retorna True se a API admin está habilitada."""
        return bool(self.api_token)

    def validate(self) -> list[str]:
        """Valida configurações admin."""
        errors: list[str] = []
        if self.api_token and len(self.api_token) < 16:
            errors.append("ADMIN_API_TOKEN deve ter ao menos 16 caracteres")
        return errors


def _load_admin_from_env() -> AdminSettings:
    """Carrega AdminSettings de variáveis de ambiente."""
    return AdminSettings(api_token=os.getenv("ADMIN_API_TOKEN", ""))


@lru_cache(maxsize=1)
def get_admin_settings() -> AdminSettings:
    """Retorna instância cacheada de AdminSettings."""
    return _load_admin_from_env()
