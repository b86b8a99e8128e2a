import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import (
    APIRouter,
    Depends,
    Query,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from core.auth import AuthenticatedAdmin, authenticate_admin
from core.deps import get_console_state, get_current_admin
from core.exceptions import APIError, NotFoundError
from core.state import (
    AdminConsoleState,
    OrderRemoved,
    OrdersLoaded,
    OrderStatusChanged,
)

from ..enums.order_enums import OrderSource
from ..schemas.order_schemas import (
    OrderCreate,
    OrderDeleted,
    OrderOut,
    OrderStatusUpdate,
    OrderUpdate,
)
from ..services.order_service import OrderService
from ..services.status_service import reconcile_total
from ..services.sync_service import OrderSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def get_sync_service(request: Request) -> OrderSyncService:
    return request.app.state.sync_service


class ConnectionManager:
    """Open live order sockets"""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"Live orders socket connected ({len(self.active_connections)} open)")

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.info(f"Live orders socket closed ({len(self.active_connections)} open)")


manager = ConnectionManager()


@router.get("", response_model=List[OrderOut])
async def get_orders(
    source: OrderSource = Query(
        OrderSource.REALTIME, description="Store to read the orders from"
    ),
    service: OrderService = Depends(get_order_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """
    List every order, newest first.

    - **source**: `realtime` (sorted by creation time) or `documents`
      (sorted by order date)
    """
    if source == OrderSource.DOCUMENTS:
        return await service.list_document_orders()

    orders = await state.track("orders", service.list_orders())
    state.dispatch(OrdersLoaded(orders))
    return orders


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
async def create_order(
    order: OrderCreate,
    sync: OrderSyncService = Depends(get_sync_service),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    record = await sync.create_order(order.to_record())
    return OrderOut.from_record(record)


@router.get("/{order_id}", response_model=OrderOut)
async def get_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    order = await service.get_order(order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


@router.patch("/{order_id}", response_model=OrderOut)
async def update_order(
    order_id: str,
    changes: OrderUpdate,
    service: OrderService = Depends(get_order_service),
    sync: OrderSyncService = Depends(get_sync_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    record = await service.get_order_record(order_id)
    if record is None:
        raise NotFoundError(f"Order {order_id} not found")

    patch = reconcile_total(record, changes.to_patch())
    await state.track("orders", sync.update_order(order_id, patch))
    order = await service.get_order(order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    state.dispatch(OrderStatusChanged(order_id, order.status))
    return order


@router.patch("/{order_id}/status", response_model=OrderOut)
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service),
    sync: OrderSyncService = Depends(get_sync_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """Move an order to another lifecycle status in both stores."""
    if await service.get_order(order_id) is None:
        raise NotFoundError(f"Order {order_id} not found")

    await state.track("orders", sync.update_order_status(order_id, body.status))
    state.dispatch(OrderStatusChanged(order_id, body.status.value))
    order = await service.get_order(order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


@router.delete("/{order_id}", response_model=OrderDeleted)
async def delete_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
    sync: OrderSyncService = Depends(get_sync_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    if await service.get_order_record(order_id) is None:
        raise NotFoundError(f"Order {order_id} not found")

    await state.track("orders", sync.delete_order(order_id))
    state.dispatch(OrderRemoved(order_id))
    return OrderDeleted(id=order_id)


def _serialize(order: Optional[OrderOut]) -> Optional[Dict[str, Any]]:
    return order.model_dump(by_alias=True, mode="json") if order is not None else None


@router.websocket("/live")
async def orders_live(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    order_id: Optional[str] = Query(None),
):
    """
    Push the order list (or one order with ``order_id``) on every change
    of the realtime tree. Authenticate with ``?token=<ID token>``.
    """
    app_state = websocket.app.state
    try:
        admin = await authenticate_admin(
            token, app_state.auth_provider, app_state.document_store
        )
    except APIError as e:
        logger.warning(f"Live orders socket refused: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e.detail))
        return

    await manager.connect(websocket)
    queue: asyncio.Queue = asyncio.Queue()
    service: OrderService = app_state.order_service

    def on_error(error: Exception):
        queue.put_nowait({"type": "error", "message": str(error)})

    if order_id:
        unsubscribe = service.subscribe_to_order(
            order_id,
            lambda order: queue.put_nowait({"type": "order", "order": _serialize(order)}),
            on_error,
        )
    else:
        unsubscribe = service.subscribe_to_orders(
            lambda orders: queue.put_nowait(
                {"type": "orders", "orders": [_serialize(order) for order in orders]}
            ),
            on_error,
        )

    async def send_updates():
        while True:
            await websocket.send_json(await queue.get())

    async def wait_for_close():
        while True:
            await websocket.receive_text()

    sender = asyncio.create_task(send_updates())
    receiver = asyncio.create_task(wait_for_close())
    try:
        done, pending = await asyncio.wait(
            {sender, receiver}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.error(f"Live orders socket for {admin.uid} failed: {error}")
    finally:
        unsubscribe()
        manager.disconnect(websocket)
