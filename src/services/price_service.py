from __future__ import annotations

import logging
from decimal import Decimal
from functools import partial

from domain.valuation import AssetId

from .call_executor import CallExecutor
from .price_sources import PriceSource
from .price_store import PriceStore
from .price_types import PriceResolution

logger = logging.getLogger(__name__)

ZERO_PRICE = Decimal(0)


class PriceService:
    """Resolves USD unit prices through a TTL cache in front of the oracle.

    Pricing is fail-soft: an asset the oracle cannot price resolves to zero
    with ``available=False`` instead of raising.
    """

    def __init__(
        self,
        source: PriceSource,
        store: PriceStore,
        executor: CallExecutor,
    ) -> None:
        self.source = source
        self.store = store
        self.executor = executor

    def get_price(self, asset_id: AssetId) -> Decimal:
        return self.resolve(asset_id).unit_price

    def resolve(self, asset_id: AssetId) -> PriceResolution:
        cached = self.store.read(asset_id)
        if cached is not None:
            logger.debug("Using cached price for %s", asset_id)
            return PriceResolution(asset_id=asset_id, unit_price=cached.unit_price, available=cached.available)

        try:
            price = self.executor.execute(partial(self.source.get_price, asset_id))
        except Exception:
            logger.warning("Error fetching price for %s, pricing as zero", asset_id, exc_info=True)
            return PriceResolution(asset_id=asset_id, unit_price=ZERO_PRICE, available=False)

        if price is None:
            logger.info("No price available for %s, pricing as zero", asset_id)
            entry = self.store.write(asset_id, ZERO_PRICE, available=False)
        else:
            entry = self.store.write(asset_id, price)
        return PriceResolution(asset_id=asset_id, unit_price=entry.unit_price, available=entry.available)


__all__ = ["PriceService", "ZERO_PRICE"]
