from __future__ import annotations

from decimal import Decimal

from clients.errors import ExternalServiceError
from domain.valuation import (
    Governance,
    GovernanceAddress,
    HoldingValue,
    OrganizationId,
    Realm,
    RealmAddress,
    Treasury,
    TreasuryAddress,
)
from services.call_executor import CallExecutor


def rate_limited(message: str = "Too many requests") -> ExternalServiceError:
    return ExternalServiceError(message, status_code=429)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def instant_executor(sleep: RecordingSleep | None = None) -> CallExecutor:
    return CallExecutor(pacing_seconds=0, jitter_ratio=0, sleep=sleep or RecordingSleep())


class StubPriceSource:
    def __init__(
        self,
        prices: dict[str, Decimal | None] | None = None,
        *,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.prices = prices or {}
        self.errors = errors or {}
        self.calls: list[str] = []

    def get_price(self, asset_id: str) -> Decimal | None:
        self.calls.append(asset_id)
        if asset_id in self.errors:
            raise self.errors[asset_id]
        return self.prices.get(asset_id)


class StubRpc:
    def __init__(
        self,
        *,
        balances: dict[str, int] | None = None,
        token_accounts: dict[str, list[tuple[str, Decimal]]] | None = None,
    ) -> None:
        self.balances = balances or {}
        self.token_accounts = token_accounts or {}
        self.calls: list[tuple[str, str]] = []

    def get_balance(self, address: str) -> int:
        self.calls.append(("getBalance", address))
        return self.balances.get(address, 0)

    def get_token_accounts_by_owner(self, owner: str, *, program_id: str) -> list[tuple[str, Decimal]]:
        self.calls.append(("getTokenAccountsByOwner", owner))
        return list(self.token_accounts.get(owner, []))


def make_treasury(address: str, organization_id: str = "org-1", realm: str = "realm-1") -> Treasury:
    realm_model = Realm(address=RealmAddress(realm), program_id=OrganizationId(organization_id))
    governance = Governance(address=GovernanceAddress(f"gov-{address}"), realm=realm_model)
    return Treasury(address=TreasuryAddress(address), governance=governance)


class StubDiscovery:
    def __init__(self, treasuries: dict[str, list[Treasury]] | None = None) -> None:
        self.treasuries = treasuries or {}
        self.calls: list[str] = []

    def discover_treasuries(self, organization_id: OrganizationId) -> list[Treasury]:
        self.calls.append(organization_id)
        return list(self.treasuries.get(organization_id, []))


class StubHoldingsValuator:
    def __init__(
        self,
        values: dict[str, Decimal] | None = None,
        *,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.values = values or {}
        self.errors = errors or {}
        self.calls: list[str] = []

    def holdings(self, address: TreasuryAddress) -> list[HoldingValue]:
        self.calls.append(address)
        if address in self.errors:
            raise self.errors[address]
        value = self.values.get(address, Decimal(0))
        return [HoldingValue(asset_id="USDC", quantity=value, unit_price=Decimal(1))]
