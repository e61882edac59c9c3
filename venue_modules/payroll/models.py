"""
Payroll Domain Models (``venue_modules.payroll.models``).

A ``PayrollPeriod`` is the aggregate labor cost for one pay period, keyed by
(location_id, start_date, end_date).  Aggregation spreads ``labor_cost``
evenly over the calendar days of the period (inclusive of both ends).
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class PayrollPeriod:
    id: UUID
    location_id: UUID
    start_date: date
    end_date: date
    labor_cost: Decimal
    superannuation: Decimal
    tax_withheld: Decimal
    hours_worked: Decimal | None = None

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(
                f"Payroll period ends before it starts: {self.start_date} -> {self.end_date}"
            )

    @property
    def days(self) -> int:
        """Calendar days in the period, both ends included."""
        return (self.end_date - self.start_date).days + 1

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
