"""Settings de entrega outbound (rate limit e retry)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class DeliverySettings:
    """Configurações do serviço de entrega outbound.

    Attributes:
        max_per_window: Envios permitidos por destinatário na janela
        window_seconds: Duração da janela de rate limit
        max_attempts: Tentativas totais por envio (inclui a primeira)
        base_delay_seconds: Base do backoff exponencial
        jitter_seconds: Jitter máximo somado ao backoff
        max_body_length: Tamanho máximo do corpo da mensagem
    """

    max_per_window: int = 10
    window_seconds: float = 60.0
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    jitter_seconds: float = 1.0
    max_body_length: int = 1600

    def validate(self) -> list[str]:
        """Valida configurações de entrega.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.max_per_window < 1:
            errors.append("DELIVERY_RATE_LIMIT_MAX deve ser >= 1")

        if self.window_seconds <= 0:
            errors.append("DELIVERY_RATE_LIMIT_WINDOW_SECONDS deve ser > 0")

        if self.max_attempts < 1:
            errors.append("DELIVERY_MAX_ATTEMPTS deve ser >= 1")

        if self.base_delay_seconds < 0 or self.jitter_seconds < 0:
            errors.append("DELIVERY_BASE_DELAY/JITTER devem ser >= 0")

        return errors


def _load_delivery_from_env() -> DeliverySettings:
    """Carrega DeliverySettings de variáveis de ambiente."""
    return DeliverySettings(
        max_per_window=int(os.getenv("DELIVERY_RATE_LIMIT_MAX", "10")),
        window_seconds=float(os.getenv("DELIVERY_RATE_LIMIT_WINDOW_SECONDS", "60")),
        max_attempts=int(os.getenv("DELIVERY_MAX_ATTEMPTS", "3")),
        base_delay_seconds=float(os.getenv("DELIVERY_BASE_DELAY_SECONDS", "1.0")),
        jitter_seconds=float(os.getenv("DELIVERY_JITTER_SECONDS", "1.0")),
        max_body_length=int(os.getenv("DELIVERY_MAX_BODY_LENGTH", "1600")),
    )


@lru_cache(maxsize=1)
def get_delivery_settings() -> DeliverySettings:
    """Retorna instância cacheada de DeliverySettings."""
    return _load_delivery_from_env()
