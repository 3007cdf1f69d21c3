"""Testes do ResponseCache."""

from __future__ import annotations

import pytest

from app.services.response_cache import ResponseCache, fingerprint


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_fingerprint_depends_on_model_and_prompt() -> None:
    assert fingerprint("Hola", "gpt-4") == fingerprint("Hola", "gpt-4")
    assert fingerprint("Hola", "gpt-4") != fingerprint("Hola", "gpt-3.5-turbo")
    assert fingerprint("Hola", "gpt-4") != fingerprint("Hola!", "gpt-4")
    assert len(fingerprint("Hola")) == 64


def test_get_put_counts_hits_and_misses() -> None:
    cache = ResponseCache(clock=FakeClock())

    assert cache.get("k") is None
    cache.put("k", "respuesta")
    assert cache.get("k") == "respuesta"

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["size"] == 1


def test_expired_entry_is_a_miss() -> None:
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=10, clock=clock)
    cache.put("k", "respuesta")

    clock.now = 11

    assert cache.get("k") is None
    assert len(cache) == 0


def test_capacity_evicts_oldest() -> None:
    cache = ResponseCache(max_entries=2, clock=FakeClock())
    cache.put("a", "1")
    cache.put("b", "2")
    cache.put("c", "3")

    assert cache.get("a") is None
    assert cache.get("b") == "2"
    assert cache.get("c") == "3"


def test_evict_expired_and_clear() -> None:
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=10, clock=clock)
    cache.put("a", "1")
    clock.now = 5
    cache.put("b", "2")
    clock.now = 12

    assert cache.evict_expired() == 1
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0


def test_invalid_capacity() -> None:
    with pytest.raises(ValueError):
        ResponseCache(max_entries=0)
