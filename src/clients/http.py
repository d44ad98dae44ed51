from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

# 429 is left to CallExecutor so pacing and backoff stay in one place.
TRANSIENT_STATUSES = frozenset({502, 503, 504})


def mount_transport_retries(
    session: requests.Session,
    *,
    attempts: int,
    backoff_seconds: float = 0.5,
    methods: frozenset[str] = frozenset({"GET"}),
) -> requests.Session:
    """Retry connection failures and gateway errors at the transport level."""
    retry = Retry(
        total=attempts,
        backoff_factor=backoff_seconds,
        status_forcelist=TRANSIENT_STATUSES,
        allowed_methods=methods,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


__all__ = ["TRANSIENT_STATUSES", "mount_transport_retries"]
