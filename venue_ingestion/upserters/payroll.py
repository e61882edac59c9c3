"""
Payroll upserter: validated labor row -> PayrollPeriodModel.

Natural key: (location_id, start_date, end_date).  labor_cost is the row's
total wages; superannuation and tax withheld are carried separately and do
not feed the labor figure.  Two rows with the same period in one file:
the later line wins.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from venue_kernel.db.types import ZERO
from venue_kernel.db.upsert import upsert

from venue_ingestion.domain.types import ParsedRow, SourceType
from venue_ingestion.upserters.base import UpsertContext, UpsertResult
from venue_modules.payroll.orm import PayrollPeriodModel


class PayrollUpserter:
    """Writes aggregate labor cost per pay period."""

    source_type: SourceType = SourceType.LABOR

    def upsert(
        self,
        row: ParsedRow,
        session: Session,
        context: UpsertContext,
    ) -> UpsertResult:
        start_date = row.get_date("period_start")
        end_date = row.get_date("period_end")

        period_id = upsert(
            session,
            PayrollPeriodModel,
            {
                "location_id": context.location_id,
                "start_date": start_date,
                "end_date": end_date,
                "labor_cost": row.get_amount("total_wages"),
                "superannuation": row.get_amount("superannuation", ZERO),
                "tax_withheld": row.get_amount("tax_withheld", ZERO),
                "hours_worked": row.get_amount("hours_worked"),
                "import_job_id": context.job_id,
                "created_by_id": context.actor_id,
            },
            conflict_columns=("location_id", "start_date", "end_date"),
            now=context.now,
            actor_id=context.actor_id,
        )
        return UpsertResult(
            entity_type="payroll_period",
            entity_id=period_id,
            natural_key=(context.location_id, start_date, end_date),
        )
