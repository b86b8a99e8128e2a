# backend/modules/analytics/routers/dashboard_router.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from core.auth import AuthenticatedAdmin
from core.deps import get_console_state, get_current_admin
from core.state import AdminConsoleState, DashboardLoaded

from ..schemas.dashboard_schemas import DashboardResponse
from ..services.dashboard_service import DashboardService

router = APIRouter(tags=["Dashboard"])
logger = logging.getLogger(__name__)


def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard_service


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    chart_range: Optional[str] = Query(
        None,
        alias="range",
        description="daily, weekly, 15days, monthly, 3months, 6months or yearly",
    ),
    service: DashboardService = Depends(get_dashboard_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """
    Order counters over every order plus a per-day earnings/orders series
    for the trailing window. Unknown ranges fall back to weekly.
    """
    dashboard = await state.track("dashboard", service.get_dashboard(chart_range))
    state.dispatch(DashboardLoaded(dashboard))
    return dashboard
