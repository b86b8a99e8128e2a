# backend/modules/analytics/tests/test_dashboard_service.py

"""
Tests for dashboard counters and the per-day chart series.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from core.memory_store import InMemoryDocumentStore
from modules.analytics.constants import CHART_RANGE_DAYS, ChartRange
from modules.analytics.services.dashboard_service import (
    DashboardService,
    build_chart_series,
    format_bucket_label,
    resolve_chart_range,
    summarize_orders,
)
from modules.orders.services.status_service import derive_order

NOW = datetime(2024, 10, 15, 18, 30, tzinfo=timezone.utc)


def order_on(day_offset, total=10.0, **fields):
    """Derived order dated ``day_offset`` days before NOW."""
    record = {"total": total, "orderDate": (NOW - timedelta(days=day_offset)).isoformat()}
    record.update(fields)
    return derive_order(record)


class TestSummary:
    def test_counts_partition_total(self):
        orders = [
            derive_order({"status": "completed", "total": 10}),
            derive_order({"status": "delivered", "total": 5}),
            derive_order({"status": "canceled", "total": 7}),
            derive_order({"status": "Cancelled", "total": 1}),
            derive_order({"currentStatusIndex": 1, "total": 2}),
            derive_order({"currentStatusIndex": 3, "total": 3}),
            derive_order({"total": 4}),
        ]

        summary = summarize_orders(orders)

        assert summary.total_orders == 7
        assert summary.completed_orders == 2
        assert summary.canceled_orders == 2
        assert summary.pending_orders == 3
        assert (
            summary.completed_orders + summary.pending_orders + summary.canceled_orders
            == summary.total_orders
        )
        assert summary.total_earnings == 32

    def test_empty(self):
        summary = summarize_orders([])
        assert summary.total_orders == 0
        assert summary.total_earnings == 0


class TestChartSeries:
    def test_weekly_has_seven_days_oldest_first(self):
        series = build_chart_series([], ChartRange.WEEKLY, NOW)

        today = NOW.date()
        assert len(series) == 7
        assert [point.day for point in series] == [
            today - timedelta(days=offset) for offset in range(6, -1, -1)
        ]
        assert series[-1].date == "Oct 15"

    def test_orders_land_in_their_day(self):
        orders = [order_on(0, 20), order_on(0, 5), order_on(2, 8)]

        series = build_chart_series(orders, ChartRange.WEEKLY, NOW)

        assert series[-1].orders == 2
        assert series[-1].earnings == 25
        assert series[-3].orders == 1
        assert series[-3].earnings == 8

    def test_old_orders_are_excluded(self):
        series = build_chart_series([order_on(10)], ChartRange.WEEKLY, NOW)
        assert all(point.orders == 0 and point.earnings == 0 for point in series)

    @pytest.mark.parametrize("chart_range", [ChartRange.WEEKLY, ChartRange.MONTHLY])
    def test_window_boundary(self, chart_range):
        days = CHART_RANGE_DAYS[chart_range]
        inside = order_on(days - 1)
        outside = order_on(days)

        series = build_chart_series([inside, outside], chart_range, NOW)

        assert len(series) == days
        assert series[0].orders == 1
        assert sum(point.orders for point in series) == 1

    def test_undated_orders_are_skipped(self):
        undated = derive_order({"total": 99})
        series = build_chart_series([undated], ChartRange.WEEKLY, NOW)
        assert sum(point.orders for point in series) == 0

    def test_daily_shows_a_week(self):
        assert len(build_chart_series([], ChartRange.DAILY, NOW)) == 7

    def test_yearly_labels_are_months(self):
        series = build_chart_series([], ChartRange.YEARLY, NOW)
        assert len(series) == 365
        assert series[-1].date == "Oct"

    def test_day_bucket_is_utc(self):
        late_evening = derive_order(
            {"total": 1, "orderDate": "2024-10-15T23:30:00-05:00"}
        )
        series = build_chart_series([late_evening], ChartRange.WEEKLY, datetime(2024, 10, 16, 12, tzinfo=timezone.utc))
        assert series[-1].day == date(2024, 10, 16)
        assert series[-1].orders == 1


def test_unknown_range_falls_back_to_weekly():
    assert resolve_chart_range("fortnightly") == ChartRange.WEEKLY
    assert resolve_chart_range(None) == ChartRange.WEEKLY
    assert resolve_chart_range("3months") == ChartRange.THREE_MONTHS


def test_bucket_labels():
    assert format_bucket_label(date(2024, 3, 5), ChartRange.MONTHLY) == "Mar 5"
    assert format_bucket_label(date(2024, 3, 5), ChartRange.YEARLY) == "Mar"


@pytest.mark.asyncio
async def test_dashboard_reads_every_order(test_settings):
    document_store = InMemoryDocumentStore()
    await document_store.set(
        "orders", "a", {"currentStatusIndex": 4, "total": 30, "orderDate": NOW.isoformat()}
    )
    await document_store.set(
        "orders", "b", {"items": [{"price": 10, "quantity": 2}], "delivery": 5}
    )
    service = DashboardService(document_store, test_settings)

    dashboard = await service.get_dashboard("weekly", now=NOW)

    assert dashboard.range == ChartRange.WEEKLY
    assert dashboard.data.total_orders == 2
    assert dashboard.data.completed_orders == 1
    assert dashboard.data.pending_orders == 1
    assert dashboard.data.total_earnings == 55
    assert dashboard.chart_data[-1].earnings == 30
