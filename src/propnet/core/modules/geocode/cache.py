"""Time-bounded cache for geocoding results."""

import time
from collections import OrderedDict
from collections.abc import Callable

from propnet.core.modules.geocode.models import GeocodeResult


def cache_key(address: str) -> str:
    return address.strip().lower()


class GeocodeCache:
    """Address -> coordinates cache with a fixed TTL and a size bound.

    Oldest entries are evicted first once ``max_entries`` is reached. Losing
    entries only costs an extra provider call.
    """

    def __init__(self, ttl_seconds: float, max_entries: int = 1000, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, GeocodeResult]] = OrderedDict()

    def get(self, address: str) -> GeocodeResult | None:
        key = cache_key(address)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, result = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return result

    def set(self, address: str, result: GeocodeResult) -> None:
        key = cache_key(address)
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), result)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
