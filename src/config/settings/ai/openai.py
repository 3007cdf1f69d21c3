"""Settings de OpenAI.

Configurações para integração com OpenAI API e cache de respostas.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class OpenAISettings:
    """Configurações do OpenAI.

    Attributes:
        api_key: Chave da API OpenAI
        model: Modelo padrão a usar
        timeout_seconds: Timeout para chamadas à API
        max_tokens: Limite padrão de tokens de saída
        temperature: Temperatura padrão
        cache_ttl_seconds: TTL do cache de respostas
        cache_max_entries: Capacidade do cache de respostas
        enabled: Se integração OpenAI está habilitada
    """

    api_key: str = ""
    model: str = "gpt-3.5-turbo"
    timeout_seconds: float = 30.0
    max_tokens: int = 500
    temperature: float = 0.7
    cache_ttl_seconds: int = 1800  # 30 min
    cache_max_entries: int = 100
    enabled: bool = True

    def validate(self) -> list[str]:
        """Valida configurações do OpenAI.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.enabled and not self.api_key:
            errors.append("OPENAI_API_KEY não configurado mas OPENAI_ENABLED=true")

        if self.timeout_seconds <= 0:
            errors.append("OPENAI_TIMEOUT_SECONDS deve ser > 0")

        if self.max_tokens < 1:
            errors.append("OPENAI_MAX_TOKENS deve ser >= 1")

        if not 0.0 <= self.temperature <= 2.0:
            errors.append("OPENAI_TEMPERATURE deve estar entre 0 e 2")

        if self.cache_ttl_seconds <= 0 or self.cache_max_entries < 1:
            errors.append("OPENAI_CACHE_TTL_SECONDS/OPENAI_CACHE_MAX_ENTRIES inválidos")

        return errors


def _load_openai_from_env() -> OpenAISettings:
    """Carrega OpenAISettings de variáveis de ambiente."""
    return OpenAISettings(
        api_key=os.getenv("OPENAI_API_KEY", ""),
        model=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo"),
        timeout_seconds=float(os.getenv("OPENAI_TIMEOUT_SECONDS", "30")),
        max_tokens=int(os.getenv("OPENAI_MAX_TOKENS", "500")),
        temperature=float(os.getenv("OPENAI_TEMPERATURE", "0.7")),
        cache_ttl_seconds=int(os.getenv("OPENAI_CACHE_TTL_SECONDS", "1800")),
        cache_max_entries=int(os.getenv("OPENAI_CACHE_MAX_ENTRIES", "100")),
        enabled=os.getenv("OPENAI_ENABLED", "true").lower() in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_openai_settings() -> OpenAISettings:
    """Retorna instância cacheada de OpenAISettings."""
    return _load_openai_from_env()
