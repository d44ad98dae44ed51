from __future__ import annotations

import base64
import itertools
import logging
from decimal import Decimal
from typing import Any

import requests

from .errors import RATE_LIMIT_STATUS, SolanaRpcError
from .http import mount_transport_retries

logger = logging.getLogger(__name__)


class SolanaRpcClient:
    """Minimal Solana JSON-RPC client covering the read methods the pipeline needs."""

    def __init__(
        self,
        *,
        rpc_url: str,
        timeout: float = 10.0,
        commitment: str = "confirmed",
        session: requests.Session | None = None,
        transport_retries: int = 2,
    ) -> None:
        if not rpc_url:
            msg = "rpc_url must be provided"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout
        self.commitment = commitment
        self._session = mount_transport_retries(
            session or requests.Session(), attempts=transport_retries, methods=frozenset({"POST"})
        )
        self._ids = itertools.count(1)

    def get_balance(self, address: str) -> int:
        """Native balance in lamports."""
        result = self._call("getBalance", [address, {"commitment": self.commitment}])
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, int):
            raise SolanaRpcError("getBalance returned unexpected payload", payload=result)
        return value

    def get_token_accounts_by_owner(self, owner: str, *, program_id: str) -> list[tuple[str, Decimal]]:
        """(mint, display-unit amount) for every token account of ``owner`` under ``program_id``."""
        result = self._call(
            "getTokenAccountsByOwner",
            [
                owner,
                {"programId": program_id},
                {"encoding": "jsonParsed", "commitment": self.commitment},
            ],
        )
        entries = result.get("value") if isinstance(result, dict) else None
        if not isinstance(entries, list):
            raise SolanaRpcError("getTokenAccountsByOwner returned unexpected payload", payload=result)
        return [self._parse_token_account(entry) for entry in entries]

    def get_program_accounts(
        self,
        program_id: str,
        *,
        filters: list[dict[str, Any]] | None = None,
        pubkeys_only: bool = False,
    ) -> list[dict[str, Any]]:
        options: dict[str, Any] = {"encoding": "base64", "commitment": self.commitment}
        if filters:
            options["filters"] = filters
        if pubkeys_only:
            options["dataSlice"] = {"offset": 0, "length": 0}
        result = self._call("getProgramAccounts", [program_id, options])
        if not isinstance(result, list):
            raise SolanaRpcError("getProgramAccounts returned unexpected payload", payload=result)
        return result

    @staticmethod
    def memcmp(offset: int, data: bytes | str) -> dict[str, Any]:
        """Filter matching raw bytes, or a base58 address, at ``offset``."""
        if isinstance(data, bytes):
            encoded = base64.b64encode(data).decode("ascii")
            return {"memcmp": {"offset": offset, "bytes": encoded, "encoding": "base64"}}
        return {"memcmp": {"offset": offset, "bytes": data}}

    def _call(self, method: str, params: list[Any]) -> Any:
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        logger.debug("RPC %s %s", method, params[0] if params else "")
        try:
            response = self._session.post(self.rpc_url, json=body, timeout=self.timeout)
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
            raise SolanaRpcError(f"{method} request failed", status_code=status_code, payload=payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise SolanaRpcError(f"{method} request failed", status_code=status_code) from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise SolanaRpcError(f"{method} returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise SolanaRpcError(f"{method} returned unexpected payload type", payload=payload_raw)

        error = payload_raw.get("error")
        if isinstance(error, dict):
            code = error.get("code")
            # Some providers report throttling as a JSON-RPC error instead of HTTP 429.
            status_code = RATE_LIMIT_STATUS if code == RATE_LIMIT_STATUS else response.status_code
            raise SolanaRpcError(
                error.get("message") or f"{method} failed", status_code=status_code, payload=payload_raw
            )

        return payload_raw.get("result")

    @staticmethod
    def _parse_token_account(entry: dict[str, Any]) -> tuple[str, Decimal]:
        try:
            info = entry["account"]["data"]["parsed"]["info"]
            mint = info["mint"]
            token_amount = info["tokenAmount"]
        except (KeyError, TypeError) as exc:
            raise SolanaRpcError("token account is not jsonParsed", payload=entry) from exc

        raw_amount = token_amount.get("uiAmountString")
        if raw_amount is None:
            raw_amount = token_amount.get("uiAmount") or 0
        return str(mint), Decimal(str(raw_amount))


__all__ = ["SolanaRpcClient"]
