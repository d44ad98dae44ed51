from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from db import models
from domain.valuation import FleetValuation, OrganizationId, OrganizationValuation


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


class FleetValuationRepository:
    """Append-only history of fleet-wide totals."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, total_value_usd: Decimal, computed_at: datetime) -> FleetValuation:
        orm_row = models.FleetValuationOrm(value=total_value_usd, calculated_at=computed_at)
        self._session.add(orm_row)
        self._session.commit()
        self._session.refresh(orm_row)
        return self._to_domain(orm_row)

    def latest(self) -> FleetValuation | None:
        stmt = (
            select(models.FleetValuationOrm)
            .order_by(models.FleetValuationOrm.calculated_at.desc(), models.FleetValuationOrm.id.desc())
            .limit(1)
        )
        orm_row = self._session.scalar(stmt)
        if orm_row is None:
            return None
        return self._to_domain(orm_row)

    @staticmethod
    def _to_domain(orm_row: models.FleetValuationOrm) -> FleetValuation:
        return FleetValuation(total_value_usd=orm_row.value, computed_at=_as_utc(orm_row.calculated_at))


class OrganizationValuationRepository:
    """Append-only history of per-organization totals."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(
        self, organization_id: OrganizationId, total_value_usd: Decimal, computed_at: datetime
    ) -> OrganizationValuation:
        orm_row = models.OrganizationValuationOrm(
            organization_id=str(organization_id),
            value=total_value_usd,
            calculated_at=computed_at,
        )
        self._session.add(orm_row)
        self._session.commit()
        self._session.refresh(orm_row)
        return self._to_domain(orm_row)

    def latest(self, organization_id: OrganizationId) -> OrganizationValuation | None:
        orm_cls = models.OrganizationValuationOrm
        stmt = (
            select(orm_cls)
            .where(orm_cls.organization_id == str(organization_id))
            .order_by(orm_cls.calculated_at.desc(), orm_cls.id.desc())
            .limit(1)
        )
        orm_row = self._session.scalar(stmt)
        if orm_row is None:
            return None
        return self._to_domain(orm_row)

    def list(self, organization_id: OrganizationId) -> list[OrganizationValuation]:
        orm_cls = models.OrganizationValuationOrm
        stmt = (
            select(orm_cls)
            .where(orm_cls.organization_id == str(organization_id))
            .order_by(orm_cls.calculated_at.asc(), orm_cls.id.asc())
        )
        return [self._to_domain(row) for row in self._session.scalars(stmt).all()]

    @staticmethod
    def _to_domain(orm_row: models.OrganizationValuationOrm) -> OrganizationValuation:
        return OrganizationValuation(
            organization_id=OrganizationId(orm_row.organization_id),
            total_value_usd=orm_row.value,
            computed_at=_as_utc(orm_row.calculated_at),
        )
