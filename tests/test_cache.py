import pytest

from ccbff.utils.cache import AccountCaches, TTLCache


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_entry_expires_lazily():
    clock = _Clock()
    cache = TTLCache(clock=clock)
    cache.add("k", "v", 10)
    clock.now = 9.9
    assert cache.get("k") == "v"
    clock.now = 10.0
    assert cache.get("k") is None
    assert len(cache) == 0


def test_non_positive_ttl_is_not_stored():
    cache = TTLCache(clock=_Clock())
    cache.add("k", "old", 100)
    cache.add("k", "new", 0)
    assert cache.get("k") is None
    cache.add("k2", "v", -5)
    assert cache.get("k2") is None


def test_replace_refreshes_value_and_ttl():
    clock = _Clock()
    cache = TTLCache(clock=clock)
    cache.add("k", 1, 10)
    clock.now = 8
    cache.replace("k", 2, 10)
    clock.now = 15
    assert cache.get("k") == 2


def test_lru_eviction_respects_recent_reads():
    cache = TTLCache(max_entries=2, clock=_Clock())
    cache.add("a", 1, 60)
    cache.add("b", 2, 60)
    assert cache.get("a") == 1  # a is now most recent
    cache.add("c", 3, 60)
    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_expired_entries_evicted_before_live_ones():
    clock = _Clock()
    cache = TTLCache(max_entries=2, clock=clock)
    cache.add("live", 1, 100)
    cache.add("short", 2, 5)
    clock.now = 6
    cache.add("new", 3, 100)
    assert cache.get("live") == 1
    assert cache.get("new") == 3


def test_delete_clear_and_items():
    cache = TTLCache(clock=_Clock())
    cache.add("a", 1, 10)
    cache.add("b", 2, 10)
    cache.delete("a")
    assert dict(cache.items()) == {"b": 2}
    cache.clear()
    assert len(cache) == 0


def test_account_namespaces_are_isolated():
    caches = AccountCaches(clock=_Clock())
    caches.for_account("1").add("token", "one", 60)
    caches.for_account("2").add("token", "two", 60)
    assert caches.for_account("1").get("token") == "one"
    caches.clear("1")
    assert caches.for_account("1").get("token") is None
    assert caches.for_account("2").get("token") == "two"
    with pytest.raises(ValueError):
        caches.for_account("")


def test_account_namespaces_are_bounded_lru():
    caches = AccountCaches(max_accounts=2, clock=_Clock())
    caches.for_account("1").add("token", "one", 60)
    caches.for_account("2").add("token", "two", 60)
    caches.for_account("1")
    caches.for_account("3")
    assert len(caches) == 2
    assert caches.for_account("1").get("token") == "one"
    # "2" was least recently used and lost its namespace
    assert caches.for_account("2").get("token") is None
    for i in range(1000):
        caches.for_account(f"acct-{i}")
    assert len(caches) == 2
