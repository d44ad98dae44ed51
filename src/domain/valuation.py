from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import NewType

from pydantic import BaseModel, ConfigDict, computed_field, model_validator

OrganizationId = NewType("OrganizationId", str)
RealmAddress = NewType("RealmAddress", str)
GovernanceAddress = NewType("GovernanceAddress", str)
TreasuryAddress = NewType("TreasuryAddress", str)
AssetId = NewType("AssetId", str)


class Realm(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: RealmAddress
    program_id: OrganizationId


class Governance(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: GovernanceAddress
    realm: Realm


class Treasury(BaseModel):
    """Native treasury derived from exactly one governance."""

    model_config = ConfigDict(frozen=True)

    address: TreasuryAddress
    governance: Governance


class HoldingValue(BaseModel):
    """One priced balance of a treasury.

    ``price_available`` is False when the oracle had no price or failed and the
    holding was priced as zero, so "worth nothing" and "could not be priced"
    stay distinguishable.
    """

    model_config = ConfigDict(frozen=True)

    asset_id: AssetId
    quantity: Decimal
    unit_price: Decimal
    price_available: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def value(self) -> Decimal:
        return self.quantity * self.unit_price

    @model_validator(mode="after")
    def _validate_quantity(self) -> HoldingValue:
        if self.quantity < 0:
            raise ValueError("HoldingValue.quantity must be non-negative")
        return self


class OrganizationValuation(BaseModel):
    organization_id: OrganizationId
    total_value_usd: Decimal
    computed_at: datetime


class FleetValuation(BaseModel):
    total_value_usd: Decimal
    computed_at: datetime


def sum_values(holdings: list[HoldingValue]) -> Decimal:
    return sum((holding.value for holding in holdings), start=Decimal(0))
