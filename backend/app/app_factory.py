"""Application factory.

``create_app`` builds the FastAPI application. Stores are created from the
settings when the app starts, unless ready-made backends are passed in
(the test suite passes in-memory ones).
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, settings as default_settings
from core.exceptions import register_exception_handlers
from core.state import (
    AdminConsoleState,
    DashboardLoaded,
    MenuLoaded,
    OrdersLoaded,
    ProfileLoaded,
    RequestFailed,
)
from modules.analytics.routers import dashboard_router
from modules.analytics.services.dashboard_service import DashboardService
from modules.auth.routes.profile_routes import router as profile_router
from modules.auth.routes.session_routes import router as session_router
from modules.auth.services.profile_service import ProfileService
from modules.menu.routes import router as menu_router
from modules.menu.services import MenuService
from modules.orders.routes.order_routes import router as order_router
from modules.orders.services.order_service import OrderService
from modules.orders.services.sync_service import OrderSyncService

from .startup import Backends, build_backends, configure_startup_logging, run_startup_checks

LOGGER = logging.getLogger(__name__)


def wire_services(app: FastAPI, backends: Backends, config: Settings) -> None:
    """Attach stores, services and the console state to ``app.state``."""
    state = app.state
    state.document_store = backends.document_store
    state.realtime_store = backends.realtime_store
    state.auth_provider = backends.auth_provider

    state.order_service = OrderService(backends.realtime_store, backends.document_store, config)
    state.sync_service = OrderSyncService(backends.realtime_store, backends.document_store, config)
    state.menu_service = MenuService(backends.document_store, config)
    state.dashboard_service = DashboardService(backends.document_store, config)
    state.profile_service = ProfileService(backends.document_store, config)

    async def load_profile(uid: str):
        return ProfileLoaded(await state.profile_service.get_profile(uid))

    async def load_menu(uid: str):
        return MenuLoaded(await state.menu_service.get_menu_items())

    async def load_orders(uid: str):
        return OrdersLoaded(await state.order_service.list_orders())

    async def load_dashboard(uid: str):
        return DashboardLoaded(await state.dashboard_service.get_dashboard())

    state.console_state = AdminConsoleState(
        {
            "profile": load_profile,
            "menu": load_menu,
            "orders": load_orders,
            "dashboard": load_dashboard,
        }
    )


def start_orders_mirror(app: FastAPI):
    """Keep the orders slice in step with the realtime tree."""
    console_state: AdminConsoleState = app.state.console_state

    def on_error(error: Exception):
        LOGGER.error(f"Live orders subscription failed: {error}")
        console_state.dispatch(RequestFailed("orders", str(error)))

    return app.state.order_service.subscribe_to_orders(
        lambda orders: console_state.dispatch(OrdersLoaded(orders)), on_error
    )


def create_app(
    config: Optional[Settings] = None, backends: Optional[Backends] = None
) -> FastAPI:
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_startup_logging(config)
        if backends is None:
            run_startup_checks(config)
            wire_services(app, build_backends(config), config)

        unsubscribe = start_orders_mirror(app) if config.orders_live_mirror else None
        try:
            yield
        finally:
            if unsubscribe is not None:
                unsubscribe()
            LOGGER.info("Admin console shut down")

    app = FastAPI(
        title="Restaurant Admin Console API",
        description="Orders, menu, dashboard and profile management for a restaurant admin.",
        version="1.0.0",
        lifespan=lifespan,
    )

    if backends is not None:
        wire_services(app, backends, config)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {
            "status": "ok",
            "environment": config.environment,
            "store_backend": config.store_backend,
        }

    app.include_router(order_router)
    app.include_router(menu_router)
    app.include_router(dashboard_router)
    app.include_router(profile_router)
    app.include_router(session_router)

    return app
