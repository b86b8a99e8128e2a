# backend/modules/analytics/routers/__init__.py

from .dashboard_router import router as dashboard_router

__all__ = ["dashboard_router"]
