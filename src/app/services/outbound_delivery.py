"""Serviço de entrega outbound (WhatsApp via transporte injetado).

Fluxo de send():
1. Normaliza destinatário para E.164 (falha → INVALID_RECIPIENT, sem retry)
2. Valida corpo (vazio ou acima do limite → INVALID_BODY)
3. Consulta janela de rate limit do destinatário (excedido → RATE_LIMITED)
4. Chama o transporte com timeout e retry exponencial com jitter
   (somente TRANSIENT é repetido)
5. Estima custo por país × segmentos e atualiza métricas agregadas

Uma chamada que falha em todas as tentativas gera exatamente uma falha
nas métricas.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from api.connectors.twilio.errors import (
    DeliveryErrorKind,
    classify_transport_error,
    user_message_for,
)
from app.observability import record_delivery
from app.protocols.messaging_transport import TransportError
from utils.phone import country_code_of, format_phone_number, mask_phone

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from app.protocols.messaging_transport import MessagingTransportProtocol
    from app.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

MAX_BODY_LENGTH = 1600
SEGMENT_LENGTH = 160

# Custo estimado por segmento, por código de país
COST_PER_SEGMENT: dict[str, float] = {
    "+34": 0.0042,
    "+33": 0.0055,
    "+1": 0.0055,
    "+52": 0.0065,
}
DEFAULT_COST_PER_SEGMENT = 0.005


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Resultado de uma chamada send()."""

    success: bool
    recipient: str | None = None
    message_id: str | None = None
    error: str | None = None
    error_kind: DeliveryErrorKind | None = None
    cost: float = 0.0
    processing_time_ms: float = 0.0
    attempts: int = 0
    rate_limited: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message_id": self.message_id,
            "error": self.error,
            "error_kind": str(self.error_kind) if self.error_kind else None,
            "cost": round(self.cost, 6),
            "processing_time_ms": round(self.processing_time_ms, 2),
            "attempts": self.attempts,
            "rate_limited": self.rate_limited,
        }


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """Item de envio em lote."""

    to: str
    body: str
    media_url: str | None = None


@dataclass(slots=True)
class _DeliveryCounters:
    sent: int = 0
    successful: int = 0
    failed: int = 0
    rate_limited: int = 0
    total_cost: float = 0.0


def estimate_cost(recipient: str, body: str) -> float:
    """Custo estimado: custo por segmento do país × segmentos de 160 caracteres."""
    country = country_code_of(recipient)
    per_segment = COST_PER_SEGMENT.get(country or "", DEFAULT_COST_PER_SEGMENT)
    segments = max(1, math.ceil(len(body) / SEGMENT_LENGTH))
    return per_segment * segments


class OutboundDeliveryService:
    """Entrega mensagens com rate limit por destinatário e retry.

    Args:
        transport: Primitivo de envio (MessagingTransportProtocol)
        rate_limiter: Janela de envios por destinatário
        max_attempts: Tentativas totais por envio (inclui a primeira)
        base_delay_seconds: Base do backoff exponencial
        jitter_seconds: Jitter máximo somado ao backoff
        timeout_seconds: Timeout por tentativa
        max_body_length: Tamanho máximo do corpo
        default_country: País aplicado a números nacionais
        sleep: Função de espera (injetável em testes)
        rng: Gerador de jitter (injetável em testes)
    """

    def __init__(
        self,
        transport: MessagingTransportProtocol,
        rate_limiter: RateLimiter,
        *,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        jitter_seconds: float = 1.0,
        timeout_seconds: float = 15.0,
        max_body_length: int = MAX_BODY_LENGTH,
        default_country: str = "+34",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Callable[[float, float], float] = random.uniform,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts deve ser >= 1")
        self._transport = transport
        self._rate_limiter = rate_limiter
        self._max_attempts = max_attempts
        self._base_delay_seconds = base_delay_seconds
        self._jitter_seconds = jitter_seconds
        self._timeout_seconds = timeout_seconds
        self._max_body_length = max_body_length
        self._default_country = default_country
        self._sleep = sleep
        self._rng = rng
        self._counters = _DeliveryCounters()
        self._last_reset = time.time()

    @property
    def rate_limiter(self) -> RateLimiter:
        """Rate limiter (exposto para varredura periódica)."""
        return self._rate_limiter

    async def send(
        self,
        recipient: str,
        body: str,
        *,
        media_url: str | None = None,
    ) -> DeliveryResult:
        """Envia mensagem ao destinatário. Nunca levanta exceção."""
        started = time.perf_counter()

        formatted = format_phone_number(recipient, self._default_country)
        if formatted is None:
            logger.warning(
                "delivery_invalid_recipient",
                extra={"recipient": mask_phone(recipient)},
            )
            return self._rejected(DeliveryErrorKind.INVALID_RECIPIENT, started)

        text = (body or "").strip()
        if not text or len(text) > self._max_body_length:
            logger.warning(
                "delivery_invalid_body",
                extra={
                    "recipient": mask_phone(formatted),
                    "body_length": len(text),
                    "max_body_length": self._max_body_length,
                },
            )
            return self._rejected(DeliveryErrorKind.INVALID_BODY, started, recipient=formatted)

        if not self._rate_limiter.try_acquire(formatted):
            self._counters.rate_limited += 1
            logger.warning(
                "delivery_rate_limited",
                extra={"recipient": mask_phone(formatted)},
            )
            return self._rejected(
                DeliveryErrorKind.RATE_LIMITED,
                started,
                recipient=formatted,
                rate_limited=True,
            )

        logger.info(
            "delivery_started",
            extra={"recipient": mask_phone(formatted), "body_length": len(text)},
        )

        attempts = 0
        kind: DeliveryErrorKind = DeliveryErrorKind.TRANSIENT
        while attempts < self._max_attempts:
            attempts += 1
            try:
                message_id = await asyncio.wait_for(
                    self._transport.send(formatted, text, media_url=media_url),
                    timeout=self._timeout_seconds,
                )
            except TimeoutError:
                kind = DeliveryErrorKind.TRANSIENT
                error_detail = "timeout"
            except TransportError as exc:
                kind = classify_transport_error(exc)
                error_detail = str(exc)
            except Exception as exc:
                kind = DeliveryErrorKind.TRANSIENT
                error_detail = type(exc).__name__
            else:
                return self._succeeded(formatted, text, message_id, attempts, started)

            if not kind.is_retryable or attempts >= self._max_attempts:
                break
            delay = self._backoff_delay(attempts - 1)
            logger.warning(
                "delivery_attempt_failed",
                extra={
                    "recipient": mask_phone(formatted),
                    "attempt": attempts,
                    "max_attempts": self._max_attempts,
                    "error_kind": str(kind),
                    "error": error_detail,
                    "retry_in_seconds": round(delay, 3),
                },
            )
            await self._sleep(delay)

        return self._failed(formatted, kind, attempts, started)

    async def send_bulk(
        self,
        messages: Sequence[OutboundMessage],
        *,
        batch_size: int = 5,
        batch_delay_seconds: float = 1.0,
    ) -> list[DeliveryResult]:
        """Envia mensagens em lotes concorrentes, com pausa entre lotes."""
        if batch_size < 1:
            raise ValueError("batch_size deve ser >= 1")
        results: list[DeliveryResult] = []
        for start in range(0, len(messages), batch_size):
            batch = messages[start:start + batch_size]
            results.extend(
                await asyncio.gather(
                    *(self.send(item.to, item.body, media_url=item.media_url) for item in batch)
                )
            )
            if start + batch_size < len(messages):
                await self._sleep(batch_delay_seconds)

        successful = sum(1 for result in results if result.success)
        logger.info(
            "delivery_bulk_completed",
            extra={
                "total": len(results),
                "successful": successful,
                "failed": len(results) - successful,
            },
        )
        return results

    def snapshot(self) -> dict[str, Any]:
        """Métricas agregadas de entrega."""
        counters = self._counters
        success_rate = counters.successful / counters.sent if counters.sent else 0.0
        average_cost = counters.total_cost / counters.successful if counters.successful else 0.0
        return {
            "sent": counters.sent,
            "successful": counters.successful,
            "failed": counters.failed,
            "rate_limited": counters.rate_limited,
            "total_cost": round(counters.total_cost, 6),
            "success_rate": round(success_rate, 4),
            "average_cost": round(average_cost, 6),
            "rate_limit_entries": len(self._rate_limiter),
            "uptime_seconds": round(time.time() - self._last_reset),
        }

    def reset(self) -> None:
        """Zera as métricas agregadas."""
        self._counters = _DeliveryCounters()
        self._last_reset = time.time()
        logger.info("delivery_metrics_reset")

    # ──────────────────────────────────────────────────────────────
    # Internos
    # ──────────────────────────────────────────────────────────────

    def _backoff_delay(self, attempt_index: int) -> float:
        jitter = self._rng(0, self._jitter_seconds) if self._jitter_seconds > 0 else 0.0
        return self._base_delay_seconds * (2**attempt_index) + jitter

    def _succeeded(
        self,
        recipient: str,
        text: str,
        message_id: str,
        attempts: int,
        started: float,
    ) -> DeliveryResult:
        elapsed_ms = _elapsed_ms(started)
        cost = estimate_cost(recipient, text)
        self._counters.sent += 1
        self._counters.successful += 1
        self._counters.total_cost += cost
        logger.info(
            "delivery_succeeded",
            extra={
                "recipient": mask_phone(recipient),
                "message_id": message_id,
                "attempts": attempts,
                "cost": round(cost, 6),
                "processing_time_ms": round(elapsed_ms, 2),
            },
        )
        record_delivery(
            success=True,
            attempts=attempts,
            cost=cost,
            processing_time_ms=elapsed_ms,
        )
        return DeliveryResult(
            success=True,
            recipient=recipient,
            message_id=message_id,
            cost=cost,
            processing_time_ms=elapsed_ms,
            attempts=attempts,
        )

    def _failed(
        self,
        recipient: str,
        kind: DeliveryErrorKind,
        attempts: int,
        started: float,
    ) -> DeliveryResult:
        elapsed_ms = _elapsed_ms(started)
        self._counters.sent += 1
        self._counters.failed += 1
        logger.error(
            "delivery_failed",
            extra={
                "recipient": mask_phone(recipient),
                "error_kind": str(kind),
                "attempts": attempts,
                "processing_time_ms": round(elapsed_ms, 2),
            },
        )
        record_delivery(
            success=False,
            attempts=attempts,
            cost=0.0,
            processing_time_ms=elapsed_ms,
            error_kind=str(kind),
        )
        return DeliveryResult(
            success=False,
            recipient=recipient,
            error=user_message_for(kind),
            error_kind=kind,
            processing_time_ms=elapsed_ms,
            attempts=attempts,
        )

    def _rejected(
        self,
        kind: DeliveryErrorKind,
        started: float,
        *,
        recipient: str | None = None,
        rate_limited: bool = False,
    ) -> DeliveryResult:
        return DeliveryResult(
            success=False,
            recipient=recipient,
            error=user_message_for(kind),
            error_kind=kind,
            processing_time_ms=_elapsed_ms(started),
            rate_limited=rate_limited,
        )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
