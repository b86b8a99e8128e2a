# backend/core/state.py

"""
Process wide state of the admin console.

The console keeps four slices (profile, menu, orders, dashboard), each
with its data, a loading flag, the last error message and the time of the
last successful fetch. Slices are only changed through ``dispatch`` with
one of the action types below; services never touch them directly.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

T = TypeVar("T")

SLICE_NAMES = ("profile", "menu", "orders", "dashboard")


class _Slice(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_loading: bool = False
    error: Optional[str] = None
    last_fetched: Optional[datetime] = None


class ProfileSlice(_Slice):
    data: Optional[Dict[str, Any]] = None


class MenuSlice(_Slice):
    items: List[Dict[str, Any]] = Field(default_factory=list)
    is_adding: bool = False


class OrdersSlice(_Slice):
    items: List[Dict[str, Any]] = Field(default_factory=list)


class DashboardSlice(_Slice):
    data: Dict[str, Any] = Field(default_factory=dict)
    chart_data: List[Dict[str, Any]] = Field(default_factory=list)


class ConsoleSnapshot(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    profile: ProfileSlice
    menu: MenuSlice
    orders: OrdersSlice
    dashboard: DashboardSlice


# Actions


@dataclass(frozen=True)
class RequestStarted:
    slice: str
    adding: bool = False


@dataclass(frozen=True)
class RequestFailed:
    slice: str
    message: str


@dataclass(frozen=True)
class ProfileLoaded:
    profile: Any


@dataclass(frozen=True)
class ProfileUpdated:
    profile: Any


@dataclass(frozen=True)
class MenuLoaded:
    items: List[Any]


@dataclass(frozen=True)
class MenuItemAdded:
    item: Any


@dataclass(frozen=True)
class MenuItemUpdated:
    item_id: str
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MenuItemRemoved:
    item_id: str


@dataclass(frozen=True)
class OrdersLoaded:
    orders: List[Any]


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: str
    status: str


@dataclass(frozen=True)
class OrderRemoved:
    order_id: str


@dataclass(frozen=True)
class DashboardLoaded:
    dashboard: Any


@dataclass(frozen=True)
class SliceCleared:
    slice: str


@dataclass(frozen=True)
class StateCleared:
    pass


Action = Union[
    RequestStarted,
    RequestFailed,
    ProfileLoaded,
    ProfileUpdated,
    MenuLoaded,
    MenuItemAdded,
    MenuItemUpdated,
    MenuItemRemoved,
    OrdersLoaded,
    OrderStatusChanged,
    OrderRemoved,
    DashboardLoaded,
    SliceCleared,
    StateCleared,
]

# Fetches one slice for an admin uid and returns the action that stores it
Loader = Callable[[str], Awaitable[Action]]


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, Mapping):
        return dict(value)
    return value


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AdminConsoleState:
    def __init__(self, loaders: Optional[Mapping[str, Loader]] = None):
        self.loaders: Dict[str, Loader] = dict(loaders or {})
        self._reset()

    def _reset(self) -> None:
        self.profile = ProfileSlice()
        self.menu = MenuSlice()
        self.orders = OrdersSlice()
        self.dashboard = DashboardSlice()

    def _slice(self, name: str) -> _Slice:
        if name not in SLICE_NAMES:
            raise ValueError(f"Unknown state slice: {name}")
        return getattr(self, name)

    def snapshot(self) -> ConsoleSnapshot:
        return ConsoleSnapshot(
            profile=self.profile.model_copy(deep=True),
            menu=self.menu.model_copy(deep=True),
            orders=self.orders.model_copy(deep=True),
            dashboard=self.dashboard.model_copy(deep=True),
        )

    def dispatch(self, action: Action) -> None:
        """Apply one action. The only way slices change."""
        if isinstance(action, RequestStarted):
            target = self._slice(action.slice)
            if action.adding and isinstance(target, MenuSlice):
                target.is_adding = True
            else:
                target.is_loading = True
            target.error = None

        elif isinstance(action, RequestFailed):
            target = self._slice(action.slice)
            target.is_loading = False
            if isinstance(target, MenuSlice):
                target.is_adding = False
            target.error = action.message

        elif isinstance(action, ProfileLoaded):
            self.profile.data = _dump(action.profile) if action.profile is not None else None
            self.profile.is_loading = False
            self.profile.last_fetched = _now()

        elif isinstance(action, ProfileUpdated):
            changes = _dump(action.profile)
            self.profile.data = {**(self.profile.data or {}), **changes}
            self.profile.is_loading = False

        elif isinstance(action, MenuLoaded):
            self.menu.items = [_dump(item) for item in action.items]
            self.menu.is_loading = False
            self.menu.last_fetched = _now()

        elif isinstance(action, MenuItemAdded):
            self.menu.items.append(_dump(action.item))
            self.menu.is_adding = False

        elif isinstance(action, MenuItemUpdated):
            for index, item in enumerate(self.menu.items):
                if item.get("id") == action.item_id:
                    self.menu.items[index] = {**item, **_dump(action.changes)}
                    break
            self.menu.is_loading = False

        elif isinstance(action, MenuItemRemoved):
            self.menu.items = [i for i in self.menu.items if i.get("id") != action.item_id]
            self.menu.is_loading = False

        elif isinstance(action, OrdersLoaded):
            self.orders.items = [_dump(order) for order in action.orders]
            self.orders.is_loading = False
            self.orders.last_fetched = _now()

        elif isinstance(action, OrderStatusChanged):
            for order in self.orders.items:
                if order.get("id") == action.order_id:
                    order["status"] = action.status
            self.orders.is_loading = False

        elif isinstance(action, OrderRemoved):
            self.orders.items = [o for o in self.orders.items if o.get("id") != action.order_id]
            self.orders.is_loading = False

        elif isinstance(action, DashboardLoaded):
            dashboard = _dump(action.dashboard)
            self.dashboard.data = dashboard.get("data", {})
            self.dashboard.chart_data = dashboard.get("chartData", [])
            self.dashboard.is_loading = False
            self.dashboard.last_fetched = _now()

        elif isinstance(action, SliceCleared):
            setattr(self, action.slice, type(self._slice(action.slice))())

        elif isinstance(action, StateCleared):
            self._reset()

        else:
            raise TypeError(f"Unsupported state action: {action!r}")

    async def track(self, slice_name: str, awaitable: Awaitable[T], adding: bool = False) -> T:
        """
        Await a service call with the slice marked as loading.

        On failure the error message is stored on the slice and the
        exception is re-raised. The caller dispatches the success action.
        """
        self.dispatch(RequestStarted(slice_name, adding=adding))
        try:
            return await awaitable
        except Exception as e:
            self.dispatch(RequestFailed(slice_name, str(e) or e.__class__.__name__))
            raise

    async def _load(self, name: str, uid: str) -> None:
        action = await self.track(name, self.loaders[name](uid))
        self.dispatch(action)

    async def load_all(self, uid: str) -> ConsoleSnapshot:
        """
        Fetch every slice concurrently. A failing slice keeps its error
        message and does not stop the others.
        """
        names = [name for name in SLICE_NAMES if name in self.loaders]
        results = await asyncio.gather(
            *(self._load(name, uid) for name in names), return_exceptions=True
        )
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(f"Loading {name} for {uid} failed: {result}")
        return self.snapshot()
