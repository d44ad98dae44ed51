from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from domain.valuation import AssetId, HoldingValue, OrganizationId, TreasuryAddress

CENTS = Decimal("0.01")


@dataclass
class AssetValuationSummary:
    asset_id: AssetId
    quantity: Decimal = Decimal(0)
    unit_price: Decimal = Decimal(0)
    value: Decimal = Decimal(0)
    price_available: bool = True


@dataclass
class ValuationSummary:
    """Per-asset totals and treasury addresses collected over one run."""

    assets: dict[AssetId, AssetValuationSummary] = field(default_factory=dict)
    treasuries: dict[OrganizationId, list[TreasuryAddress]] = field(default_factory=lambda: defaultdict(list))

    def add_holdings(self, holdings: Iterable[HoldingValue]) -> None:
        for holding in holdings:
            summary = self.assets.get(holding.asset_id)
            if summary is None:
                summary = AssetValuationSummary(asset_id=holding.asset_id, unit_price=holding.unit_price)
                self.assets[holding.asset_id] = summary
            summary.quantity += holding.quantity
            summary.value += holding.value
            summary.price_available = summary.price_available and holding.price_available

    def add_treasuries(self, organization_id: OrganizationId, addresses: Iterable[TreasuryAddress]) -> None:
        self.treasuries[organization_id].extend(addresses)

    @property
    def unpriced_assets(self) -> list[AssetId]:
        return [asset_id for asset_id, summary in self.assets.items() if not summary.price_available]


def _quantity_text(quantity: Decimal) -> str:
    normalized = quantity.normalize()
    # normalize() turns whole amounts like 100 into 1E+2.
    return f"{normalized:f}"


def _usd_text(value: Decimal) -> str:
    return f"{value.quantize(CENTS):.2f}"


def render_valuation_summary(summary: ValuationSummary) -> str:
    lines = ["Asset totals:"]
    if not summary.assets:
        lines.append("  (empty)")
    else:
        rows: list[tuple[str, str, str, str]] = []
        for asset in sorted(summary.assets.values(), key=lambda item: item.value, reverse=True):
            price_text = _usd_text(asset.unit_price) if asset.price_available else "n/a"
            rows.append((asset.asset_id, _quantity_text(asset.quantity), price_text, _usd_text(asset.value)))

        labels = ("Asset", "Quantity", "Price USD", "Value USD")
        widths = [max(len(label), max(len(row[idx]) for row in rows)) for idx, label in enumerate(labels)]
        header = " ".join(
            f"{label:<{widths[idx]}}" if idx == 0 else f"{label:>{widths[idx]}}" for idx, label in enumerate(labels)
        )
        lines.extend([header, "-" * len(header)])
        for row in rows:
            lines.append(
                " ".join(f"{cell:<{widths[idx]}}" if idx == 0 else f"{cell:>{widths[idx]}}" for idx, cell in enumerate(row))
            )
        lines.append("-" * len(header))

    lines.append("Treasury addresses:")
    for organization_id, addresses in summary.treasuries.items():
        lines.append(f"  {organization_id}: {', '.join(addresses) if addresses else '(none)'}")
    return "\n".join(lines)
