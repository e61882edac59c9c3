"""
Module: venue_modules.payroll.orm
Responsibility: SQLAlchemy ORM persistence model for payroll periods.

Invariants enforced:
    - Natural key UNIQUE(location_id, start_date, end_date).
    - Monetary fields use Decimal (Numeric(38,9)) -- NEVER float.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from venue_kernel.db.base import TrackedBase, UUIDString


class PayrollPeriodModel(TrackedBase):
    """Aggregate labor cost for one pay period."""

    __tablename__ = "payroll_periods"

    __table_args__ = (
        UniqueConstraint(
            "location_id", "start_date", "end_date",
            name="uq_payroll_period_natural_key",
        ),
        Index("idx_payroll_location_range", "location_id", "start_date", "end_date"),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)
    labor_cost: Mapped[Decimal] = mapped_column()
    superannuation: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    tax_withheld: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    hours_worked: Mapped[Decimal | None] = mapped_column(nullable=True)

    import_job_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def to_dto(self):
        from venue_modules.payroll.models import PayrollPeriod

        return PayrollPeriod(
            id=self.id,
            location_id=self.location_id,
            start_date=self.start_date,
            end_date=self.end_date,
            labor_cost=self.labor_cost,
            superannuation=self.superannuation,
            tax_withheld=self.tax_withheld,
            hours_worked=self.hours_worked,
        )

    def __repr__(self) -> str:
        return f"<PayrollPeriodModel {self.start_date}..{self.end_date} {self.labor_cost}>"
