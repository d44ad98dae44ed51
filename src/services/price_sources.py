from __future__ import annotations

from decimal import Decimal
from typing import Protocol


class PriceSource(Protocol):
    def get_price(self, asset_id: str) -> Decimal | None: ...


__all__ = ["PriceSource"]
