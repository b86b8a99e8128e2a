# backend/modules/analytics/constants.py

"""
Constants for the dashboard.
"""

from enum import Enum


class ChartRange(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    FIFTEEN_DAYS = "15days"
    MONTHLY = "monthly"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    YEARLY = "yearly"


# Trailing days covered by each chart window (today included)
CHART_RANGE_DAYS = {
    ChartRange.DAILY: 7,
    ChartRange.WEEKLY: 7,
    ChartRange.FIFTEEN_DAYS: 15,
    ChartRange.MONTHLY: 30,
    ChartRange.THREE_MONTHS: 90,
    ChartRange.SIX_MONTHS: 180,
    ChartRange.YEARLY: 365,
}

DEFAULT_CHART_RANGE = ChartRange.WEEKLY
