from __future__ import annotations

from typing import Any, cast

import pytest
from solders.pubkey import Pubkey

from clients.governance import GovernanceRegistry, native_treasury_address
from clients.solana_rpc import SolanaRpcClient
from constants import GOVERNANCE_ACCOUNT_TYPES, REALM_ACCOUNT_TYPES, TOKEN_PROGRAM_ID
from domain.valuation import Governance, GovernanceAddress, OrganizationId, Realm, RealmAddress

PROGRAM_ID = OrganizationId("GovER5Lthms3bLBqWub97yVrMmEogzX7xNjdXpPPCVZw")
REALM = Realm(address=RealmAddress("DPiH3H3c7t47BMxqTxLsuPQpEC6Kne8GA9VXbxpnZxFE"), program_id=PROGRAM_ID)


class _StubProgramAccountsRpc:
    def __init__(self, responses: dict[int, list[str]]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, list[dict[str, Any]] | None, bool]] = []

    def get_program_accounts(
        self, program_id: str, *, filters: list[dict[str, Any]] | None = None, pubkeys_only: bool = False
    ) -> list[dict[str, Any]]:
        self.calls.append((program_id, filters, pubkeys_only))
        assert filters is not None
        account_type = _account_type_of(filters[0])
        return [{"pubkey": pubkey, "account": {}} for pubkey in self.responses.get(account_type, [])]


def _account_type_of(memcmp_filter: dict[str, Any]) -> int:
    expected = {
        SolanaRpcClient.memcmp(0, bytes([tag]))["memcmp"]["bytes"]: int(tag)
        for tag in (*REALM_ACCOUNT_TYPES, *GOVERNANCE_ACCOUNT_TYPES)
    }
    return expected[memcmp_filter["memcmp"]["bytes"]]


def test_get_realms_queries_both_realm_versions() -> None:
    rpc = _StubProgramAccountsRpc({1: ["RealmV1a"], 16: ["RealmV2a", "RealmV2b"]})
    registry = GovernanceRegistry(cast(SolanaRpcClient, rpc))

    realms = registry.get_realms(PROGRAM_ID)

    assert [realm.address for realm in realms] == ["RealmV1a", "RealmV2a", "RealmV2b"]
    assert {realm.program_id for realm in realms} == {PROGRAM_ID}
    assert len(rpc.calls) == len(REALM_ACCOUNT_TYPES)
    assert all(pubkeys_only for _, _, pubkeys_only in rpc.calls)


def test_get_realms_rejects_invalid_program_id() -> None:
    registry = GovernanceRegistry(cast(SolanaRpcClient, _StubProgramAccountsRpc({})))

    with pytest.raises(ValueError):
        registry.get_realms(OrganizationId("not-a-pubkey"))


def test_get_governances_filters_by_realm_for_every_governance_type() -> None:
    rpc = _StubProgramAccountsRpc({3: ["GovA"], 18: ["GovB"]})
    registry = GovernanceRegistry(cast(SolanaRpcClient, rpc))

    governances = registry.get_governances(REALM)

    assert [governance.address for governance in governances] == ["GovA", "GovB"]
    assert all(governance.realm == REALM for governance in governances)
    assert len(rpc.calls) == len(GOVERNANCE_ACCOUNT_TYPES)
    for program_id, filters, _ in rpc.calls:
        assert program_id == PROGRAM_ID
        assert filters is not None
        assert filters[1] == {"memcmp": {"offset": 1, "bytes": REALM.address}}


def test_native_treasury_address_is_the_governance_pda() -> None:
    governance = Governance(
        address=GovernanceAddress(TOKEN_PROGRAM_ID),
        realm=REALM,
    )

    address = native_treasury_address(governance)

    expected, _ = Pubkey.find_program_address(
        [b"native-treasury", bytes(Pubkey.from_string(governance.address))],
        Pubkey.from_string(PROGRAM_ID),
    )
    assert address == str(expected)
    assert not Pubkey.from_string(address).is_on_curve()
    assert native_treasury_address(governance) == address


def test_native_treasury_address_rejects_invalid_governance() -> None:
    governance = Governance(address=GovernanceAddress("bad"), realm=REALM)

    with pytest.raises(ValueError):
        native_treasury_address(governance)
