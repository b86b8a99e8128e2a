import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..constants import ChartRange


class DashboardData(BaseModel):
    total_orders: int = 0
    total_earnings: float = 0
    completed_orders: int = 0
    pending_orders: int = 0
    canceled_orders: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChartDataPoint(BaseModel):
    date: str = Field(..., description="Display label for the bucket")
    day: dt.date = Field(..., description="Calendar day (UTC) the bucket covers")
    earnings: float = 0
    orders: int = 0


class DashboardResponse(BaseModel):
    data: DashboardData
    chart_data: List[ChartDataPoint]
    range: ChartRange
    last_fetched: Optional[dt.datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
