import pytest

from learn_your_way.cache import DEFAULT_TTL_SECONDS, ResponseCache, make_cache_key


def test_default_ttl_is_fifteen_minutes():
    assert DEFAULT_TTL_SECONDS == 900
    assert ResponseCache().default_ttl == 900


def test_get_returns_value_before_ttl(clock):
    cache = ResponseCache(default_ttl=60, clock=clock)
    cache.set("k", {"slides": []})
    clock.advance(59.9)
    assert cache.get("k") == {"slides": []}


def test_get_expires_at_ttl_and_removes_entry(clock):
    cache = ResponseCache(default_ttl=60, clock=clock)
    cache.set("k", "v")
    cache.set("other", "v2", ttl=600)
    assert cache.size == 2

    clock.advance(60)
    assert cache.get("k") is None
    assert cache.size == 1
    assert cache.get("other") == "v2"


def test_expired_entry_lingers_until_read(clock):
    cache = ResponseCache(default_ttl=10, clock=clock)
    cache.set("k", "v")
    clock.advance(100)
    # no background sweep
    assert cache.size == 1
    cache.get("k")
    assert cache.size == 0


def test_per_entry_ttl_overrides_default(clock):
    cache = ResponseCache(default_ttl=10, clock=clock)
    cache.set("short", 1, ttl=1)
    cache.set("long", 2)
    clock.advance(5)
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_set_overwrites_and_restarts_clock(clock):
    cache = ResponseCache(default_ttl=10, clock=clock)
    cache.set("k", "old")
    clock.advance(8)
    cache.set("k", "new")
    clock.advance(8)
    assert cache.get("k") == "new"


def test_delete_and_clear(clock):
    cache = ResponseCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.delete("a")
    cache.delete("missing")
    assert cache.get("a") is None
    assert len(cache) == 1
    cache.clear()
    assert cache.size == 0


def test_rejects_non_positive_ttl():
    with pytest.raises(ValueError):
        ResponseCache(default_ttl=0)
    with pytest.raises(ValueError):
        ResponseCache().set("k", "v", ttl=-1)


def test_cache_key_is_stable_across_key_order():
    a = make_cache_key("slides", {"content": "x", "gradeLevel": 8})
    b = make_cache_key("slides", {"gradeLevel": 8, "content": "x"})
    assert a == b
    assert a.startswith("slides:")
    assert make_cache_key("mindmap", {"content": "x", "gradeLevel": 8}) != a
