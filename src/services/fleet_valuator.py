from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Sequence

from sqlalchemy.orm import Session, sessionmaker

from db.repositories import FleetValuationRepository
from domain.valuation import OrganizationId
from utils.valuation_summary import ValuationSummary, render_valuation_summary

from .organization_valuator import OrganizationValuator

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FleetValuator:
    def __init__(
        self,
        *,
        organization_valuator: OrganizationValuator,
        organization_ids: Sequence[OrganizationId],
        session_factory: sessionmaker[Session],
        pacing_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.organization_valuator = organization_valuator
        self.organization_ids = list(organization_ids)
        self.session_factory = session_factory
        self.pacing_seconds = pacing_seconds
        self._sleep = sleep
        self._now = now

    def valuate_fleet(self) -> Decimal:
        """Sum every organization in configured order and store the fleet total.

        Organizations run one after another; the first failure aborts the run
        before anything is stored for the fleet.
        """
        summary = ValuationSummary()
        totals: list[Decimal] = []
        for index, organization_id in enumerate(self.organization_ids):
            if index and self.pacing_seconds > 0:
                self._sleep(self.pacing_seconds)
            totals.append(self.organization_valuator.valuate_organization(organization_id, summary=summary))

        total = sum(totals, start=Decimal(0)).quantize(CENTS)
        with self.session_factory() as session:
            FleetValuationRepository(session).add(total, self._now())

        logger.info("%s", render_valuation_summary(summary))
        if summary.unpriced_assets:
            logger.warning("%d assets priced as zero", len(summary.unpriced_assets))
        logger.info("Total TVL for %d organizations updated: %s", len(totals), total)
        return total


__all__ = ["FleetValuator"]
