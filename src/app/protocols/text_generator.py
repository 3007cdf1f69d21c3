"""Protocolo do primitivo de geração de texto (backend LLM).

Falhas chegam como erros tipados para que o serviço de geração decida
entre desculpa pré-definida (recuperável) e ausência de resposta.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TokenUsage:
    """Consumo de tokens de uma chamada."""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        """Total de tokens consumidos."""
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Resultado bruto do backend."""

    text: str
    usage: TokenUsage
    model: str


class GenerationError(Exception):
    """Base de erros do backend de geração."""

    kind = "backend_error"


class RateLimitedError(GenerationError):
    """Backend recusou por excesso de requisições (recuperável)."""

    kind = "rate_limit"


class QuotaExceededError(GenerationError):
    """Cota da conta esgotada (recuperável do ponto de vista do cliente)."""

    kind = "quota"


class InvalidRequestError(GenerationError):
    """Requisição rejeitada pelo backend (não recuperável)."""

    kind = "invalid_request"


class GenerationBackendError(GenerationError):
    """Falha genérica do backend (rede, 5xx, resposta inesperada)."""


class TextGeneratorProtocol(ABC):
    """Contrato do backend generativo."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        model: str,
    ) -> GenerationResult:
        """Gera texto a partir do prompt.

        Raises:
            GenerationError: Subclasse tipada conforme a falha
        """
