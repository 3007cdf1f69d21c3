"""Serviço de geração de respostas (backend generativo + cache).

Fluxo de generate():
1. Sanitiza o prompt (caracteres de controle, truncamento com marcador)
2. Consulta o cache pelo fingerprint do prompt sanitizado
3. Em miss, chama o backend com tokens/temperatura limitados e timeout
4. Estima custo pela tabela de preços por modelo e armazena no cache

Erros do backend:
- rate limit / cota esgotada → desculpa pré-definida (sempre enviável)
- qualquer outro → None (o chamador não deve responder)
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ai.utils.sanitizer import sanitize_prompt
from app.observability import record_latency, record_token_usage
from app.protocols.text_generator import (
    GenerationError,
    QuotaExceededError,
    RateLimitedError,
)
from app.services.response_cache import fingerprint
from config.logging import log_fallback

if TYPE_CHECKING:
    from app.protocols.text_generator import TextGeneratorProtocol, TokenUsage
    from app.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)

RATE_LIMIT_APOLOGY = (
    "Disculpa, estoy experimentando alta demanda en este momento. "
    "Por favor, intenta de nuevo en unos minutos."
)
QUOTA_APOLOGY = (
    "Servicio temporalmente no disponible. "
    "Por favor, contacta directamente para asistencia."
)

# USD por 1K tokens: (entrada, saída)
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "gpt-4": (0.03, 0.06),
    "gpt-4-turbo": (0.01, 0.03),
    "gpt-3.5-turbo": (0.001, 0.002),
    "gpt-3.5-turbo-16k": (0.003, 0.004),
}
DEFAULT_PRICING_MODEL = "gpt-3.5-turbo"

MIN_MAX_TOKENS = 1
MAX_MAX_TOKENS = 4000
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0


@dataclass(frozen=True, slots=True)
class GenerationOptions:
    """Parâmetros por chamada (None = padrão do serviço)."""

    max_tokens: int | None = None
    temperature: float | None = None
    model: str | None = None
    use_cache: bool = True


def estimate_cost(model: str, usage: TokenUsage) -> float:
    """Estima custo em USD pela tabela de preços (modelo desconhecido usa o padrão)."""
    input_rate, output_rate = MODEL_PRICING.get(model, MODEL_PRICING[DEFAULT_PRICING_MODEL])
    return (usage.prompt_tokens / 1000) * input_rate + (
        usage.completion_tokens / 1000
    ) * output_rate


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(value, upper))


class GenerativeResponseService:
    """Encapsula o backend generativo com sanitização e cache de respostas.

    Args:
        generator: Backend de geração (None = integração desabilitada)
        cache: Cache de respostas (propriedade exclusiva deste serviço)
        model: Modelo padrão
        default_max_tokens: Limite padrão de tokens de saída
        default_temperature: Temperatura padrão
        timeout_seconds: Timeout por chamada ao backend
    """

    def __init__(
        self,
        generator: TextGeneratorProtocol | None,
        cache: ResponseCache,
        *,
        model: str = DEFAULT_PRICING_MODEL,
        default_max_tokens: int = 500,
        default_temperature: float = 0.7,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._generator = generator
        self._cache = cache
        self._model = model
        self._default_max_tokens = default_max_tokens
        self._default_temperature = default_temperature
        self._timeout_seconds = timeout_seconds
        self._requests = 0
        self._total_tokens = 0
        self._total_cost = 0.0

    @property
    def enabled(self) -> bool:
        return self._generator is not None

    @property
    def cache(self) -> ResponseCache:
        """Cache de respostas (exposto para varredura periódica)."""
        return self._cache

    async def generate(
        self,
        prompt: str,
        options: GenerationOptions | None = None,
    ) -> str | None:
        """Gera resposta para o prompt.

        Returns:
            Texto gerado, desculpa pré-definida (rate limit/cota) ou None.
        """
        if self._generator is None:
            logger.error("generation_disabled")
            return None

        opts = options or GenerationOptions()
        model = opts.model or self._model
        clean_prompt = sanitize_prompt(prompt)
        if not clean_prompt:
            logger.warning("generation_empty_prompt")
            return None

        cache_key = fingerprint(clean_prompt, model)
        if opts.use_cache:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("generation_cache_hit", extra={"model": model})
                return cached

        max_tokens = int(
            _clamp(
                self._default_max_tokens if opts.max_tokens is None else opts.max_tokens,
                MIN_MAX_TOKENS,
                MAX_MAX_TOKENS,
            )
        )
        temperature = _clamp(
            self._default_temperature if opts.temperature is None else opts.temperature,
            MIN_TEMPERATURE,
            MAX_TEMPERATURE,
        )

        started = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                self._generator.complete(
                    clean_prompt,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    model=model,
                ),
                timeout=self._timeout_seconds,
            )
        except RateLimitedError:
            log_fallback(
                logger,
                "response_generation",
                reason="rate_limited",
                elapsed_ms=_elapsed_ms(started),
            )
            return RATE_LIMIT_APOLOGY
        except QuotaExceededError:
            log_fallback(
                logger,
                "response_generation",
                reason="quota_exceeded",
                elapsed_ms=_elapsed_ms(started),
            )
            return QUOTA_APOLOGY
        except TimeoutError:
            logger.error(
                "generation_timeout",
                extra={"model": model, "timeout_seconds": self._timeout_seconds},
            )
            return None
        except GenerationError as exc:
            logger.error(
                "generation_failed",
                extra={
                    "model": model,
                    "error_kind": exc.kind,
                    "error_type": type(exc).__name__,
                    "error": str(exc)[:300],
                    "prompt_length": len(clean_prompt),
                },
            )
            return None
        except Exception:
            logger.exception(
                "generation_unexpected_error",
                extra={"model": model, "prompt_length": len(clean_prompt)},
            )
            return None

        text = (result.text or "").strip()
        if not text:
            logger.warning("generation_empty_response", extra={"model": result.model})
            return None

        cost = estimate_cost(result.model or model, result.usage)
        self._requests += 1
        self._total_tokens += result.usage.total_tokens
        self._total_cost += cost
        record_latency("response_generation", "generate", _elapsed_ms(started))
        record_token_usage(
            "response_generation",
            "generate",
            prompt_tokens=result.usage.prompt_tokens,
            completion_tokens=result.usage.completion_tokens,
            total_tokens=result.usage.total_tokens,
            estimated_cost=cost,
        )

        if opts.use_cache:
            self._cache.put(cache_key, text)
        return text

    def stats(self) -> dict[str, Any]:
        """Métricas acumuladas de geração + cache."""
        return {
            "model": self._model,
            "requests": self._requests,
            "total_tokens": self._total_tokens,
            "total_cost": round(self._total_cost, 6),
            "cache": self._cache.stats(),
        }


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
