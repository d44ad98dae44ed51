from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from domain.valuation import AssetId


@dataclass(frozen=True)
class PriceCacheEntry:
    """Cached unit price; ``fetched_at`` is on the cache's monotonic clock."""

    asset_id: AssetId
    unit_price: Decimal
    fetched_at: float
    available: bool = True


@dataclass(frozen=True)
class PriceResolution:
    asset_id: AssetId
    unit_price: Decimal
    available: bool


__all__ = ["PriceCacheEntry", "PriceResolution"]
