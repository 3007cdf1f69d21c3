"""Controle de tasks assíncronas para processamento de webhooks."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Coroutine

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 100
DEFAULT_DRAIN_TIMEOUT_SECONDS = 30.0


class BackgroundTaskRunner:
    """Agenda tasks fire-and-forget com limite de concorrência.

    Exceções das tasks são capturadas no callback de conclusão e logadas;
    nunca chegam à resposta HTTP.
    """

    def __init__(self, max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> None:
        self._max_concurrency = max_concurrency
        self._semaphore: asyncio.Semaphore | None = None
        self._active_tasks: set[asyncio.Task[Any]] = set()

    @property
    def active_count(self) -> int:
        return len(self._active_tasks)

    def schedule(
        self,
        coroutine: Coroutine[Any, Any, Any],
        *,
        correlation_id: str,
        channel: str,
    ) -> int:
        """Agenda task assíncrona com limite de concorrência."""
        task = asyncio.create_task(self._run_with_limit(coroutine))
        self._active_tasks.add(task)
        task.add_done_callback(lambda done: self._on_task_done(done, channel))
        logger.info(
            "webhook_processing_scheduled",
            extra={
                "channel": channel,
                "correlation_id": correlation_id,
                "mode": "async",
                "active_tasks": len(self._active_tasks),
            },
        )
        return len(self._active_tasks)

    async def _run_with_limit(self, coroutine: Coroutine[Any, Any, Any]) -> None:
        # Semáforo criado sob demanda dentro do event loop em execução
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_concurrency)
        async with self._semaphore:
            await coroutine

    def _on_task_done(self, task: asyncio.Task[Any], channel: str) -> None:
        self._active_tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "webhook_processing_task_failed",
                    extra={
                        "channel": channel,
                        "error_type": type(exc).__name__,
                        "active_tasks": len(self._active_tasks),
                    },
                    exc_info=exc,
                )

    async def drain(self, timeout_seconds: float = DEFAULT_DRAIN_TIMEOUT_SECONDS) -> int:
        """Aguarda tasks pendentes no shutdown; cancela as que excederem o prazo.

        Returns:
            Quantidade de tasks canceladas.
        """
        if not self._active_tasks:
            return 0

        pending_now = list(self._active_tasks)
        logger.info(
            "webhook_processing_shutdown_wait",
            extra={"pending_tasks": len(pending_now), "timeout_seconds": timeout_seconds},
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return 0

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "webhook_processing_shutdown_cancelled",
            extra={"cancelled_tasks": len(pending)},
        )
        return len(pending)
