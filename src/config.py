from __future__ import annotations

from functools import cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from constants import GOVERNANCE_PROGRAM_IDS

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ARTIFACTS_DIR = PROJECT_ROOT / "artifacts"
DB_FILE = ARTIFACTS_DIR / "tvl.db"


class AppSettings(BaseSettings):
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    price_api_url: str = "https://lite-api.jup.ag/price/v3"
    database_url: str = f"sqlite:///{DB_FILE}"
    governance_program_ids: list[str] = list(GOVERNANCE_PROGRAM_IDS)

    request_timeout_seconds: float = 10.0
    transport_retries: int = 2
    call_pacing_seconds: float = 0.5
    organization_pacing_seconds: float = 2.0
    retry_attempts: int = 5
    retry_base_delay_seconds: float = 0.5
    retry_jitter_ratio: float = 0.1
    requests_per_second: float | None = None

    price_cache_ttl_seconds: float = 600.0
    treasury_batch_size: int = 25
    schedule_cadence: Literal["monthly", "daily"] = "monthly"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@cache
def config() -> AppSettings:
    return AppSettings()
