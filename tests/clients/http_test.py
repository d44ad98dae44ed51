from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter

from clients.http import TRANSIENT_STATUSES, mount_transport_retries
from clients.jupiter import JupiterPriceClient
from clients.solana_rpc import SolanaRpcClient


def test_transport_retries_cover_gateway_errors_but_not_rate_limits() -> None:
    session = mount_transport_retries(requests.Session(), attempts=3)

    adapter = session.get_adapter("https://api.example.com")
    assert isinstance(adapter, HTTPAdapter)
    retry = adapter.max_retries
    assert retry.total == 3
    assert set(retry.status_forcelist) == set(TRANSIENT_STATUSES)
    assert 429 not in retry.status_forcelist
    assert retry.raise_on_status is False


def test_rpc_client_retries_posts() -> None:
    session = requests.Session()
    SolanaRpcClient(rpc_url="https://rpc.example.com", session=session, transport_retries=4)

    retry = session.get_adapter("https://rpc.example.com").max_retries
    assert retry.total == 4
    assert "POST" in retry.allowed_methods


def test_price_client_retries_gets_only() -> None:
    session = requests.Session()
    JupiterPriceClient(session=session)

    retry = session.get_adapter("https://lite-api.jup.ag").max_retries
    assert retry.total == 2
    assert set(retry.allowed_methods) == {"GET"}
