from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from functools import partial
from typing import Callable

from sqlalchemy.orm import Session, sessionmaker

from db.repositories import OrganizationValuationRepository
from domain.valuation import OrganizationId, Treasury, sum_values
from utils.valuation_summary import ValuationSummary, render_valuation_summary

from .call_executor import CallExecutor
from .holdings_valuator import HoldingsValuator
from .treasury_discovery import TreasuryDiscovery

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 25


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrganizationValuator:
    """Computes and stores the total value held by one organization's treasuries.

    A stored row short-circuits the computation: once an organization has a
    valuation it is returned as-is on every later call. Nothing is stored when
    discovery or any treasury valuation fails.
    """

    def __init__(
        self,
        *,
        discovery: TreasuryDiscovery,
        valuator: HoldingsValuator,
        executor: CallExecutor,
        session_factory: sessionmaker[Session],
        batch_size: int = DEFAULT_BATCH_SIZE,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        if batch_size <= 0:
            msg = "batch_size must be > 0"
            raise ValueError(msg)
        self.discovery = discovery
        self.valuator = valuator
        self.executor = executor
        self.session_factory = session_factory
        self.batch_size = batch_size
        self._now = now

    def valuate_organization(
        self, organization_id: OrganizationId, *, summary: ValuationSummary | None = None
    ) -> Decimal:
        with self.session_factory() as session:
            existing = OrganizationValuationRepository(session).latest(organization_id)
        if existing is not None:
            logger.info("Returning stored TVL for organization %s", organization_id)
            return existing.total_value_usd

        logger.info("Calculating TVL for organization %s", organization_id)
        run_summary = summary if summary is not None else ValuationSummary()
        treasuries = self.discovery.discover_treasuries(organization_id)

        total = Decimal(0)
        batch_count = (len(treasuries) + self.batch_size - 1) // self.batch_size
        for batch_index, start in enumerate(range(0, len(treasuries), self.batch_size), start=1):
            batch = treasuries[start : start + self.batch_size]
            batch_total = sum((self._valuate_treasury(treasury, run_summary) for treasury in batch), start=Decimal(0))
            total += batch_total
            logger.info(
                "Organization %s batch %d/%d: %d treasuries, value=%s",
                organization_id,
                batch_index,
                batch_count,
                len(batch),
                batch_total,
            )
        run_summary.add_treasuries(organization_id, [treasury.address for treasury in treasuries])

        with self.session_factory() as session:
            OrganizationValuationRepository(session).add(organization_id, total, self._now())
        logger.info("Stored TVL for organization %s: %s", organization_id, total)
        if summary is None:
            logger.info("%s", render_valuation_summary(run_summary))
        return total

    def _valuate_treasury(self, treasury: Treasury, summary: ValuationSummary) -> Decimal:
        # Inner calls already pace themselves and take their own limiter tokens.
        holdings = self.executor.execute(
            partial(self.valuator.holdings, treasury.address), pacing=0, limited=False
        )
        summary.add_holdings(holdings)
        return sum_values(holdings)


__all__ = ["DEFAULT_BATCH_SIZE", "OrganizationValuator"]
