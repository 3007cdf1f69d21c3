"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e podem ser agregadas
posteriormente (ex.: log-based metrics, BigQuery).

Métricas suportadas:
- Latência: tempo de execução por componente/operação
- Tokens: consumo e custo estimado de chamadas ao backend generativo
- Entrega: resultado de cada envio outbound (tentativas, custo, erro)

Uso:
    from app.observability import record_latency

    start = time.perf_counter()
    # ... operação ...
    record_latency("outbound_delivery", "send", (time.perf_counter() - start) * 1000)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "response_generation")
        operation: Nome da operação (ex: "generate")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    extra: dict[str, object] = {
        "metric_type": "latency",
        "component": component,
        "operation": operation,
        "latency_ms": round(latency_ms, 2),
    }
    if correlation_id:
        extra["correlation_id"] = correlation_id
    logger.info("metric_latency", extra=extra)


def record_token_usage(
    component: str,
    operation: str,
    prompt_tokens: int,
    completion_tokens: int,
    total_tokens: int,
    estimated_cost: float | None = None,
) -> None:
    """Registra uso de tokens (custo).

    Args:
        component: Nome do componente (ex: "response_generation")
        operation: Nome da operação (ex: "generate")
        prompt_tokens: Tokens no prompt
        completion_tokens: Tokens na resposta
        total_tokens: Total de tokens
        estimated_cost: Custo estimado em USD (tabela de preços por modelo)
    """
    extra: dict[str, object] = {
        "metric_type": "token_usage",
        "component": component,
        "operation": operation,
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": total_tokens,
    }
    if estimated_cost is not None:
        extra["estimated_cost"] = round(estimated_cost, 6)
    logger.info("metric_token_usage", extra=extra)


def record_delivery(
    *,
    success: bool,
    attempts: int,
    cost: float,
    processing_time_ms: float,
    error_kind: str | None = None,
) -> None:
    """Registra resultado de um envio outbound.

    Args:
        success: Se o provedor aceitou a mensagem
        attempts: Tentativas de transporte realizadas
        cost: Custo estimado do envio
        processing_time_ms: Tempo total da chamada send()
        error_kind: Categoria do erro (taxonomia de entrega) quando falhou
    """
    logger.info(
        "metric_delivery",
        extra={
            "metric_type": "delivery",
            "component": "outbound_delivery",
            "success": success,
            "attempts": attempts,
            "cost": round(cost, 6),
            "processing_time_ms": round(processing_time_ms, 2),
            "error_kind": error_kind,
        },
    )
