from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class DecimalAsString(TypeDecorator):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: object) -> str | None:
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value: str | None, dialect: object) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)


# NUMERIC everywhere except SQLite, which has no exact decimal storage.
ValueColumn = Numeric(asdecimal=True).with_variant(DecimalAsString(), "sqlite")


class Base(DeclarativeBase):
    pass


class FleetValuationOrm(Base):
    __tablename__ = "fleet_valuation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    value: Mapped[Decimal] = mapped_column(ValueColumn, nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class OrganizationValuationOrm(Base):
    __tablename__ = "organization_valuation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[str] = mapped_column(String, nullable=False)
    value: Mapped[Decimal] = mapped_column(ValueColumn, nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


Index(
    "ix_organization_valuation_latest",
    OrganizationValuationOrm.organization_id,
    OrganizationValuationOrm.calculated_at.desc(),
)
