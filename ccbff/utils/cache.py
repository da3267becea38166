import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Iterator, Optional


class TTLCache:
    """
    Bounded in-process cache with per-entry TTL.

    Expiry is checked lazily on read. Once `max_entries` is reached the least
    recently used entry is evicted (expired entries go first). The clock is
    injectable so tests can move time forward without sleeping.
    """

    def __init__(self, max_entries: int = 4096, clock: Callable[[], float] = time.monotonic):
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._data: "OrderedDict[Hashable, tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()
        self._max = max_entries
        self._clock = clock

    def get(self, key: Hashable) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires_at, value = item
            if expires_at <= now:
                self._data.pop(key, None)
                return None
            self._data.move_to_end(key)
            return value

    def add(self, key: Hashable, value: Any, ttl_secs: float) -> None:
        if ttl_secs <= 0:
            # never store something that is already stale
            self.delete(key)
            return
        now = self._clock()
        with self._lock:
            self._data[key] = (now + float(ttl_secs), value)
            self._data.move_to_end(key)
            self._evict(now)

    # replace has the same semantics: new value, fresh TTL
    replace = add

    def delete(self, key: Hashable) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def items(self) -> Iterator[tuple[Hashable, Any]]:
        now = self._clock()
        with self._lock:
            live = [(k, v) for k, (exp, v) in self._data.items() if exp > now]
        return iter(live)

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for exp, _ in self._data.values() if exp > now)

    def _evict(self, now: float) -> None:
        if len(self._data) <= self._max:
            return
        for k in [k for k, (exp, _) in self._data.items() if exp <= now]:
            del self._data[k]
        while len(self._data) > self._max:
            self._data.popitem(last=False)


class AccountCaches:
    """
    One TTLCache namespace per account id, created on first use.

    At most `max_accounts` namespaces are held; the least recently used
    account loses its whole namespace first.
    """

    def __init__(self, max_entries: int = 256, max_accounts: int = 1024, clock: Callable[[], float] = time.monotonic):
        if max_accounts < 1:
            raise ValueError("max_accounts must be positive")
        self._caches: "OrderedDict[str, TTLCache]" = OrderedDict()
        self._lock = threading.Lock()
        self._max = max_entries
        self._max_accounts = max_accounts
        self._clock = clock

    def for_account(self, account_id: str) -> TTLCache:
        if not account_id:
            raise ValueError("account_id is required")
        with self._lock:
            cache = self._caches.get(account_id)
            if cache is None:
                cache = TTLCache(max_entries=self._max, clock=self._clock)
                self._caches[account_id] = cache
                while len(self._caches) > self._max_accounts:
                    self._caches.popitem(last=False)
            else:
                self._caches.move_to_end(account_id)
            return cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._caches)

    def clear(self, account_id: str) -> None:
        with self._lock:
            self._caches.pop(account_id, None)
