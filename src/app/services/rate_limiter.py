"""Rate limiter de janela fixa por chave (destinatário).

Operações não suspendem entre leitura e escrita: seguras sob tasks
concorrentes no mesmo event loop sem lock.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RateWindow:
    """Janela corrente de uma chave."""

    count: int
    reset_at: float


class RateLimiter:
    """Permite até ``max_per_window`` aquisições por chave a cada janela.

    O contador só é incrementado quando a aquisição é permitida.
    """

    def __init__(
        self,
        max_per_window: int = 10,
        window_seconds: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_per_window < 1:
            raise ValueError("max_per_window deve ser >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds deve ser > 0")
        self._max_per_window = max_per_window
        self._window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, RateWindow] = {}

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def try_acquire(self, key: str) -> bool:
        """Consome uma unidade da janela da chave. False se no limite."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now >= window.reset_at:
            self._windows[key] = RateWindow(count=1, reset_at=now + self._window_seconds)
            return True
        if window.count >= self._max_per_window:
            return False
        window.count += 1
        return True

    def remaining(self, key: str) -> int:
        """Aquisições ainda disponíveis na janela corrente da chave."""
        window = self._windows.get(key)
        if window is None or self._clock() >= window.reset_at:
            return self._max_per_window
        return max(0, self._max_per_window - window.count)

    def evict_expired(self) -> int:
        """Remove janelas vencidas. Retorna quantas foram removidas."""
        now = self._clock()
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]
        if expired:
            logger.debug(
                "rate_windows_evicted",
                extra={"evicted": len(expired), "remaining": len(self._windows)},
            )
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)
