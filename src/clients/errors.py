from __future__ import annotations

from typing import Any

RATE_LIMIT_STATUS = 429


class ExternalServiceError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == RATE_LIMIT_STATUS


class SolanaRpcError(ExternalServiceError):
    pass


class PriceOracleError(ExternalServiceError):
    pass


def is_rate_limit_error(error: BaseException) -> bool:
    """True when ``error`` carries a "too many requests" signal."""
    if isinstance(error, ExternalServiceError):
        return error.is_rate_limited
    response = getattr(error, "response", None)
    return getattr(response, "status_code", None) == RATE_LIMIT_STATUS


__all__ = [
    "ExternalServiceError",
    "PriceOracleError",
    "RATE_LIMIT_STATUS",
    "SolanaRpcError",
    "is_rate_limit_error",
]
