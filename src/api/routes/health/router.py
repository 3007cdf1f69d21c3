"""Endpoints de health check para Cloud Run."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.bootstrap import SERVICE_NAME

router = APIRouter()

_PING_TIMEOUT_SECONDS = 3.0


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "degraded", "failed"]
    latency_ms: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe: verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: stores persistentes e backend de geração."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        return JSONResponse(
            content={"status": "not_ready", "checks": {}, "timestamp": _now()},
            status_code=503,
        )

    exchange_check, dedupe_check = await asyncio.gather(
        _ping(services.exchange_store),
        _ping(services.dedupe),
    )
    generation_check = DependencyCheck(
        status="ok" if services.response_service.enabled else "degraded",
        error=None if services.response_service.enabled else "not_configured",
    )

    ready = exchange_check.status != "failed" and dedupe_check.status != "failed"
    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {
            "exchange_store": exchange_check.as_dict(),
            "dedupe": dedupe_check.as_dict(),
            "generation": generation_check.as_dict(),
        },
        "background_tasks": services.runner.active_count,
        "timestamp": _now(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


async def _ping(component: Any) -> DependencyCheck:
    """Checa componentes com ``ping()``; stores em memória estão sempre ok."""
    ping = getattr(component, "ping", None)
    if ping is None:
        return DependencyCheck(status="ok")
    started_at = time.perf_counter()
    try:
        alive = await asyncio.wait_for(ping(), timeout=_PING_TIMEOUT_SECONDS)
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = round((time.perf_counter() - started_at) * 1000, 2)
    return DependencyCheck(status="ok" if alive else "degraded", latency_ms=latency_ms)


def _now() -> str:
    return datetime.now(UTC).isoformat()
