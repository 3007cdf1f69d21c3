"""Varreduras periódicas dos caches em memória.

Cada varredura roda em um loop asyncio próprio com intervalo fixo:
- contexto de conversa: intervalo de limpeza configurado (padrão 30 min)
- cache de respostas: a cada TTL
- janelas de rate limit: a cada janela

Exceções em uma varredura são logadas e o loop continua.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SweepJob:
    """Varredura periódica: nome, intervalo e função síncrona de limpeza."""

    name: str
    interval_seconds: float
    sweep: Callable[[], int]


class MaintenanceScheduler:
    """Executa varreduras periódicas até stop()."""

    def __init__(
        self,
        jobs: list[SweepJob],
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._jobs = jobs
        self._sleep = sleep
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        """Agenda um loop por varredura (idempotente)."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._run(job), name=f"maintenance:{job.name}")
            for job in self._jobs
        ]
        logger.info(
            "maintenance_started",
            extra={"jobs": [job.name for job in self._jobs]},
        )

    async def stop(self) -> None:
        """Cancela os loops e aguarda o encerramento."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            logger.info("maintenance_stopped", extra={"jobs": len(tasks)})

    def run_once(self) -> dict[str, int]:
        """Executa todas as varreduras uma vez (fora dos loops)."""
        return {job.name: self._sweep(job) for job in self._jobs}

    async def _run(self, job: SweepJob) -> None:
        while True:
            await self._sleep(job.interval_seconds)
            self._sweep(job)

    def _sweep(self, job: SweepJob) -> int:
        try:
            removed = job.sweep()
        except Exception as exc:
            logger.error(
                "maintenance_sweep_failed",
                extra={"job": job.name, "error_type": type(exc).__name__},
            )
            return 0
        logger.debug(
            "maintenance_sweep_completed",
            extra={"job": job.name, "removed": removed},
        )
        return removed
