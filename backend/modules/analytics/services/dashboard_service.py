# backend/modules/analytics/services/dashboard_service.py

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Union

from core.config import Settings, settings as default_settings
from core.stores import DocumentStore
from modules.orders.services.status_service import DerivedOrder, derive_order

from ..constants import CHART_RANGE_DAYS, DEFAULT_CHART_RANGE, ChartRange
from ..schemas.dashboard_schemas import ChartDataPoint, DashboardData, DashboardResponse

logger = logging.getLogger(__name__)


def resolve_chart_range(value: Union[ChartRange, str, None]) -> ChartRange:
    """Map a window keyword to a ChartRange; unknown keywords fall back to weekly."""
    if value is None:
        return DEFAULT_CHART_RANGE
    try:
        return ChartRange(value)
    except ValueError:
        logger.warning(f"Unknown chart range {value!r}, using {DEFAULT_CHART_RANGE.value}")
        return DEFAULT_CHART_RANGE


def format_bucket_label(day: date, chart_range: ChartRange) -> str:
    """Month and day labels (Oct 5); the yearly window shows the month only."""
    if chart_range == ChartRange.YEARLY:
        return f"{day:%b}"
    return f"{day:%b} {day.day}"


def summarize_orders(orders: Iterable[DerivedOrder]) -> DashboardData:
    """Scalar dashboard counters over already derived orders."""
    summary = DashboardData()
    for order in orders:
        summary.total_orders += 1
        summary.total_earnings += order.total
        if order.is_completed:
            summary.completed_orders += 1
        elif order.is_canceled:
            summary.canceled_orders += 1
        else:
            summary.pending_orders += 1
    return summary


def build_chart_series(
    orders: Iterable[DerivedOrder],
    chart_range: Union[ChartRange, str] = DEFAULT_CHART_RANGE,
    now: Optional[datetime] = None,
) -> List[ChartDataPoint]:
    """
    One bucket per calendar day of the trailing window, oldest first.

    Days are UTC calendar days and today is the last bucket. Orders
    without a usable date, or dated outside the window, are left out.
    """
    chart_range = resolve_chart_range(chart_range)
    days = CHART_RANGE_DAYS[chart_range]
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today = now.astimezone(timezone.utc).date()

    buckets: Dict[date, ChartDataPoint] = {}
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        buckets[day] = ChartDataPoint(
            date=format_bucket_label(day, chart_range), day=day
        )

    for order in orders:
        if order.order_date is None:
            continue
        bucket = buckets.get(order.order_date.astimezone(timezone.utc).date())
        if bucket is None:
            continue
        bucket.earnings += order.total
        bucket.orders += 1

    return list(buckets.values())


class DashboardService:
    """Builds the dashboard from every order in the document store."""

    def __init__(self, document_store: DocumentStore, config: Settings = default_settings):
        self.document_store = document_store
        self.collection = config.orders_collection
        self.default_range = resolve_chart_range(config.default_chart_range)

    async def get_dashboard(
        self,
        chart_range: Union[ChartRange, str, None] = None,
        now: Optional[datetime] = None,
    ) -> DashboardResponse:
        chart_range = resolve_chart_range(chart_range or self.default_range)
        records = await self.document_store.list(self.collection)
        orders = [derive_order(record) for record in records]

        summary = summarize_orders(orders)
        logger.info(
            f"Dashboard calculation - Total: {summary.total_orders} "
            f"Completed: {summary.completed_orders} Pending: {summary.pending_orders}"
        )

        return DashboardResponse(
            data=summary,
            chart_data=build_chart_series(orders, chart_range, now),
            range=chart_range,
            last_fetched=datetime.now(timezone.utc),
        )
