"""LruTtlCache eviction and expiry."""

import pytest

from app.infrastructure.cache.lru import LruTtlCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_least_recently_used_is_evicted() -> None:
    evicted: list[tuple[str, int]] = []
    cache: LruTtlCache[int] = LruTtlCache(2, 60, on_evict=lambda k, v: evicted.append((k, v)))

    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)

    assert evicted == [("b", 2)]
    assert "b" not in cache
    assert len(cache) == 2


def test_expired_entries_are_evicted_on_read() -> None:
    clock = FakeClock()
    evicted: list[str] = []
    cache: LruTtlCache[str] = LruTtlCache(
        10, 30, on_evict=lambda k, _v: evicted.append(k), clock=clock
    )
    cache.set("acme", "client")

    clock.now = 29.9
    assert cache.get("acme") == "client"
    clock.now = 30.0
    assert cache.get("acme") is None
    assert evicted == ["acme"]


def test_pop_does_not_call_on_evict() -> None:
    evicted: list[str] = []
    cache: LruTtlCache[int] = LruTtlCache(2, 60, on_evict=lambda k, _v: evicted.append(k))
    cache.set("a", 1)

    assert cache.pop("a") == 1
    assert cache.pop("a") is None
    assert evicted == []


def test_max_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        LruTtlCache(0, 60)
