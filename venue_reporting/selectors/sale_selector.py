"""
Module: venue_reporting.selectors.sale_selector
Responsibility: Paged listing of stored sales for drill-down from the KPI
    views.

Invariants enforced:
    - Order is stable across pages: business date, time of sale (untimed
      sales last), then source id.
    - channel_code and daypart_code match the location's reference codes
      exactly; an unknown code matches nothing.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import func, select

from venue_modules.sales.orm import SaleModel
from venue_modules.venue.orm import DaypartModel, ServiceChannelModel
from venue_reporting.domain.types import SalePage
from venue_reporting.selectors.base import BaseSelector

DEFAULT_PAGE_SIZE = 50


class SaleSelector(BaseSelector[SaleModel]):
    """Reads sales for one location."""

    def list_sales(
        self,
        location_id: UUID,
        start_date: date,
        end_date: date,
        channel_code: str | None = None,
        daypart_code: str | None = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> SalePage:
        """
        Sales with business_date in [start_date, end_date], one page at a time.

        ``page`` is 1-based.  A page past the end comes back empty with the
        real total_count.

        Raises:
            ValueError: page or page_size below 1.
        """
        if page < 1 or page_size < 1:
            raise ValueError(f"page and page_size must be at least 1, got {page} and {page_size}")

        stmt = select(SaleModel).where(
            SaleModel.location_id == location_id,
            SaleModel.business_date >= start_date,
            SaleModel.business_date <= end_date,
        )
        if channel_code is not None:
            stmt = stmt.join(ServiceChannelModel, ServiceChannelModel.id == SaleModel.channel_id).where(
                ServiceChannelModel.code == channel_code,
            )
        if daypart_code is not None:
            stmt = stmt.join(DaypartModel, DaypartModel.id == SaleModel.daypart_id).where(
                DaypartModel.code == daypart_code,
            )

        total_count = self.session.scalar(select(func.count()).select_from(stmt.subquery()))
        rows = self.session.scalars(
            stmt.order_by(
                SaleModel.business_date,
                SaleModel.sale_time.is_(None),
                SaleModel.sale_time,
                SaleModel.source_id,
            )
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return SalePage(
            items=tuple(row.to_dto() for row in rows),
            total_count=total_count,
            page=page,
            page_size=page_size,
        )
