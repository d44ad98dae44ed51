from __future__ import annotations

from solders.pubkey import Pubkey

from constants import GOVERNANCE_ACCOUNT_TYPES, NATIVE_TREASURY_SEED, REALM_ACCOUNT_TYPES
from domain.valuation import (
    Governance,
    GovernanceAddress,
    OrganizationId,
    Realm,
    RealmAddress,
    TreasuryAddress,
)

from .solana_rpc import SolanaRpcClient

# Governance accounts start with the type tag followed by the owning realm.
_REALM_OFFSET = 1


def parse_address(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError as exc:
        msg = f"Invalid address: {value!r}"
        raise ValueError(msg) from exc


def native_treasury_address(governance: Governance) -> TreasuryAddress:
    program_id = parse_address(governance.realm.program_id)
    seeds = [NATIVE_TREASURY_SEED, bytes(parse_address(governance.address))]
    address, _bump = Pubkey.find_program_address(seeds, program_id)
    return TreasuryAddress(str(address))


class GovernanceRegistry:
    """Reads SPL governance realms and governances from a program's accounts."""

    def __init__(self, rpc: SolanaRpcClient) -> None:
        self.rpc = rpc

    def get_realms(self, program_id: OrganizationId) -> list[Realm]:
        parse_address(program_id)
        realms: list[Realm] = []
        for account_type in REALM_ACCOUNT_TYPES:
            accounts = self.rpc.get_program_accounts(
                program_id,
                filters=[SolanaRpcClient.memcmp(0, bytes([account_type]))],
                pubkeys_only=True,
            )
            realms.extend(Realm(address=RealmAddress(entry["pubkey"]), program_id=program_id) for entry in accounts)
        return realms

    def get_governances(self, realm: Realm) -> list[Governance]:
        governances: list[Governance] = []
        for account_type in GOVERNANCE_ACCOUNT_TYPES:
            accounts = self.rpc.get_program_accounts(
                realm.program_id,
                filters=[
                    SolanaRpcClient.memcmp(0, bytes([account_type])),
                    SolanaRpcClient.memcmp(_REALM_OFFSET, realm.address),
                ],
                pubkeys_only=True,
            )
            governances.extend(
                Governance(address=GovernanceAddress(entry["pubkey"]), realm=realm) for entry in accounts
            )
        return governances


__all__ = ["GovernanceRegistry", "native_treasury_address", "parse_address"]
