# backend/modules/orders/services/order_service.py

"""
Order reads: one-shot fetches from either store and live subscriptions
on the realtime tree.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from core.config import Settings, settings as default_settings
from core.stores import DocumentStore, ErrorCallback, RealtimeStore, Unsubscribe, join_path

from ..schemas.order_schemas import OrderOut
from .status_service import parse_timestamp

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _records_from_tree(value: Any) -> List[Dict[str, Any]]:
    """Children of the orders node, each with its key as fallback id."""
    if not isinstance(value, dict):
        return []
    return [
        {"id": key, **child} if "id" not in child else dict(child)
        for key, child in value.items()
        if isinstance(child, dict)
    ]


def _newest_created_first(records: List[Dict[str, Any]]) -> List[OrderOut]:
    records = sorted(
        records,
        key=lambda r: parse_timestamp(r.get("createdAt")) or _EPOCH,
        reverse=True,
    )
    return [OrderOut.from_record(record) for record in records]


def _newest_ordered_first(orders: List[OrderOut]) -> List[OrderOut]:
    return sorted(orders, key=lambda o: o.order_date or _EPOCH, reverse=True)


class OrderService:
    def __init__(
        self,
        realtime_store: RealtimeStore,
        document_store: DocumentStore,
        config: Settings = default_settings,
    ):
        self.realtime_store = realtime_store
        self.document_store = document_store
        self.orders_path = config.orders_path
        self.collection = config.orders_collection

    async def list_orders(self) -> List[OrderOut]:
        """All orders in the realtime tree, newest first by creation time."""
        value = await self.realtime_store.get(self.orders_path)
        orders = _newest_created_first(_records_from_tree(value))
        logger.info(f"Fetched {len(orders)} orders from the realtime tree")
        return orders

    async def get_order_record(self, order_id: str) -> Optional[Dict[str, Any]]:
        """Raw realtime record of an order, or None."""
        value = await self.realtime_store.get(join_path(self.orders_path, order_id))
        return value if isinstance(value, dict) else None

    async def get_order(self, order_id: str) -> Optional[OrderOut]:
        record = await self.get_order_record(order_id)
        if record is None:
            return None
        return OrderOut.from_record(record, order_id)

    async def list_document_orders(self) -> List[OrderOut]:
        """All orders in the document store, newest first by order date."""
        records = await self.document_store.list(self.collection)
        orders = _newest_ordered_first([OrderOut.from_record(record) for record in records])
        logger.info(f"Fetched {len(orders)} orders from the document store")
        return orders

    def subscribe_to_orders(
        self,
        callback: Callable[[List[OrderOut]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        """Receive the full, sorted order list on every change."""

        def handle(value):
            orders = _newest_created_first(_records_from_tree(value))
            logger.debug(f"Realtime orders update: {len(orders)}")
            callback(orders)

        return self.realtime_store.listen(self.orders_path, handle, on_error)

    def subscribe_to_order(
        self,
        order_id: str,
        callback: Callable[[Optional[OrderOut]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        """Receive one order (or None once it is gone) on every change."""

        def handle(value):
            callback(OrderOut.from_record(value, order_id) if isinstance(value, dict) else None)

        return self.realtime_store.listen(
            join_path(self.orders_path, order_id), handle, on_error
        )
