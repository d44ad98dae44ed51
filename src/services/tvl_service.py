from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Sequence

from sqlalchemy.orm import Session, sessionmaker

from clients.governance import GovernanceRegistry
from clients.jupiter import JupiterPriceClient
from clients.solana_rpc import SolanaRpcClient
from config import AppSettings
from db.db import init_db
from db.repositories import FleetValuationRepository, OrganizationValuationRepository
from domain.valuation import FleetValuation, OrganizationId, OrganizationValuation

from .call_executor import CallExecutor, RateLimiter
from .fleet_valuator import FleetValuator
from .holdings_valuator import HoldingsValuator
from .organization_valuator import OrganizationValuator
from .price_service import PriceService
from .price_store import PriceCache
from .treasury_discovery import TreasuryDiscovery

logger = logging.getLogger(__name__)


class RunInProgressError(RuntimeError):
    pass


class TvlService:
    """Entry point for reads and recompute triggers.

    Only one recompute runs at a time per service; a trigger that arrives while
    another run holds the slot fails with RunInProgressError.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session],
        fleet_valuator: FleetValuator,
        organization_valuator: OrganizationValuator,
        organization_ids: Sequence[OrganizationId],
    ) -> None:
        self.session_factory = session_factory
        self.fleet_valuator = fleet_valuator
        self.organization_valuator = organization_valuator
        self.organization_ids = list(organization_ids)
        self._run_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def latest_fleet_valuation(self) -> FleetValuation | None:
        with self.session_factory() as session:
            return FleetValuationRepository(session).latest()

    def latest_organization_valuation(self, organization_id: OrganizationId) -> OrganizationValuation | None:
        with self.session_factory() as session:
            return OrganizationValuationRepository(session).latest(organization_id)

    def recompute_fleet(self) -> Decimal:
        with self._exclusive_run():
            return self.fleet_valuator.valuate_fleet()

    def trigger_fleet_recompute(self) -> threading.Thread:
        """Start a fleet run in the background and return immediately."""
        if not self._run_lock.acquire(blocking=False):
            raise RunInProgressError("A TVL run is already in progress")
        thread = threading.Thread(target=self._background_fleet_run, name="fleet-tvl", daemon=True)
        try:
            thread.start()
        except RuntimeError:
            self._run_lock.release()
            raise
        return thread

    def recompute_organization(self, organization_id: OrganizationId) -> Decimal:
        with self._exclusive_run():
            return self.organization_valuator.valuate_organization(organization_id)

    def close(self) -> None:
        """Dispose of the engine behind the session factory."""
        self.session_factory.kw["bind"].dispose()

    def update_each_organization(self) -> None:
        """Valuate every organization in order without storing a fleet total."""
        with self._exclusive_run():
            for organization_id in self.organization_ids:
                self.organization_valuator.valuate_organization(organization_id)

    def _background_fleet_run(self) -> None:
        try:
            self.fleet_valuator.valuate_fleet()
        except Exception:
            logger.exception("Error updating total TVL for all organizations")
        finally:
            self._run_lock.release()

    @contextmanager
    def _exclusive_run(self) -> Iterator[None]:
        if not self._run_lock.acquire(blocking=False):
            raise RunInProgressError("A TVL run is already in progress")
        try:
            yield
        finally:
            self._run_lock.release()


def build_default_service(settings: AppSettings) -> TvlService:
    session_factory = init_db(settings.database_url)
    limiter = RateLimiter(settings.requests_per_second) if settings.requests_per_second else None
    executor = CallExecutor(
        pacing_seconds=settings.call_pacing_seconds,
        max_retries=settings.retry_attempts,
        base_delay_seconds=settings.retry_base_delay_seconds,
        jitter_ratio=settings.retry_jitter_ratio,
        limiter=limiter,
    )
    rpc = SolanaRpcClient(
        rpc_url=settings.rpc_url,
        timeout=settings.request_timeout_seconds,
        transport_retries=settings.transport_retries,
    )
    price_service = PriceService(
        source=JupiterPriceClient(
            base_url=settings.price_api_url,
            timeout=settings.request_timeout_seconds,
            transport_retries=settings.transport_retries,
        ),
        store=PriceCache(ttl_seconds=settings.price_cache_ttl_seconds),
        executor=executor,
    )
    organization_ids = [OrganizationId(program_id) for program_id in settings.governance_program_ids]
    organization_valuator = OrganizationValuator(
        discovery=TreasuryDiscovery(GovernanceRegistry(rpc), executor),
        valuator=HoldingsValuator(rpc, price_service, executor),
        executor=executor,
        session_factory=session_factory,
        batch_size=settings.treasury_batch_size,
    )
    fleet_valuator = FleetValuator(
        organization_valuator=organization_valuator,
        organization_ids=organization_ids,
        session_factory=session_factory,
        pacing_seconds=settings.organization_pacing_seconds,
    )
    return TvlService(
        session_factory=session_factory,
        fleet_valuator=fleet_valuator,
        organization_valuator=organization_valuator,
        organization_ids=organization_ids,
    )


__all__ = ["RunInProgressError", "TvlService", "build_default_service"]
