from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

import requests

from .errors import PriceOracleError
from .http import mount_transport_retries


class JupiterPriceClient:
    """USD unit prices from the Jupiter price API.

    Understands both response shapes the API has shipped: the legacy
    ``{"data": {mint: {"price": ...}}}`` and the flat ``{mint: {"usdPrice": ...}}``.
    """

    def __init__(
        self,
        *,
        base_url: str = "https://lite-api.jup.ag/price/v3",
        timeout: float = 10.0,
        session: requests.Session | None = None,
        transport_retries: int = 2,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = mount_transport_retries(session or requests.Session(), attempts=transport_retries)

    def get_price(self, asset_id: str) -> Decimal | None:
        """Current price, or None when the oracle has no price for ``asset_id``."""
        payload = self._request(params={"ids": asset_id})
        entries = payload.get("data") if isinstance(payload.get("data"), dict) else payload
        entry = entries.get(asset_id)
        if not isinstance(entry, dict):
            return None

        raw_price = entry.get("usdPrice", entry.get("price"))
        if raw_price is None:
            return None
        try:
            return Decimal(str(raw_price))
        except InvalidOperation as exc:
            raise PriceOracleError("Jupiter returned non-numeric price", payload=entry) from exc

    def _request(self, *, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._session.request("GET", self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            payload: Any | None = None
            if resp is not None:
                try:
                    payload = resp.json()
                except ValueError:
                    payload = resp.text
            raise PriceOracleError("Jupiter price request failed", status_code=status_code, payload=payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise PriceOracleError("Jupiter price request failed", status_code=status_code) from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise PriceOracleError("Jupiter returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise PriceOracleError("Jupiter returned unexpected payload type", payload=payload_raw)

        return payload_raw


__all__ = ["JupiterPriceClient"]
