from __future__ import annotations

import threading
import time
from decimal import Decimal
from typing import Callable, Protocol

from domain.valuation import AssetId

from .price_types import PriceCacheEntry

DEFAULT_TTL_SECONDS = 600.0


class PriceStore(Protocol):
    def write(self, asset_id: AssetId, unit_price: Decimal, *, available: bool = True) -> PriceCacheEntry: ...

    def read(self, asset_id: AssetId) -> PriceCacheEntry | None: ...


class PriceCache(PriceStore):
    """Process-local TTL cache of unit prices.

    Stale entries are never evicted; ``read`` ignores them and the next
    ``write`` for the asset overwrites them.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            msg = "ttl_seconds must be > 0"
            raise ValueError(msg)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[AssetId, PriceCacheEntry] = {}
        self._lock = threading.Lock()

    def write(self, asset_id: AssetId, unit_price: Decimal, *, available: bool = True) -> PriceCacheEntry:
        entry = PriceCacheEntry(
            asset_id=asset_id,
            unit_price=unit_price,
            fetched_at=self._clock(),
            available=available,
        )
        with self._lock:
            self._entries[asset_id] = entry
        return entry

    def read(self, asset_id: AssetId) -> PriceCacheEntry | None:
        with self._lock:
            entry = self._entries.get(asset_id)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at >= self.ttl_seconds:
            return None
        return entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["DEFAULT_TTL_SECONDS", "PriceCache", "PriceStore"]
