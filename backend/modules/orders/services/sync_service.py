# backend/modules/orders/services/sync_service.py

"""
Order synchronization between the realtime tree and the document store.

Every order mutation is applied to both stores so that readers of either
see the same state. The two writes of a mutation are issued together and
joined with "wait for all, fail if any failed": both always run to
completion, and a failure in either surfaces as a ``DualWriteError``.
Nothing is rolled back; the store that succeeded keeps the change.

Live subscribers follow the realtime tree only.
"""

import asyncio
import logging
import secrets
import string
import time
from typing import Any, Awaitable, Dict, Mapping, Optional, Union

from core.config import Settings, settings as default_settings
from core.exceptions import DualWriteError, ValidationError
from core.stores import DocumentStore, RealtimeStore, join_path

from ..enums.order_enums import OrderStatus

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits

# Fields that may never be changed by an update
IMMUTABLE_FIELDS = ("id", "createdAt")


def generate_order_id(timestamp_ms: Optional[int] = None) -> str:
    """``order_<epoch ms>_<9 base36 chars>``"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(9))
    return f"order_{timestamp_ms}_{suffix}"


class OrderSyncService:
    """Applies order create/update/delete to both stores."""

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
        self.dual_write_creates = config.dual_write_creates
        self._last_timestamp = 0

    def _timestamp(self) -> int:
        """Epoch milliseconds, strictly increasing across calls."""
        now = int(time.time() * 1000)
        self._last_timestamp = max(now, self._last_timestamp + 1)
        return self._last_timestamp

    def _order_path(self, order_id: str) -> str:
        return join_path(self.orders_path, order_id)

    async def create_order(self, order: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create an order with a fresh id and creation/update stamps.

        The realtime tree is the primary copy. With ``dual_write_creates``
        the document is written at the same time under the same id.
        """
        self._validate_new_order(order)

        timestamp = self._timestamp()
        order_id = generate_order_id(timestamp)
        record = {
            **{k: v for k, v in order.items() if k not in IMMUTABLE_FIELDS},
            "id": order_id,
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }

        if self.dual_write_creates:
            await self._dual_write(
                "create",
                order_id,
                self.realtime_store.set(self._order_path(order_id), record),
                self.document_store.set(self.collection, order_id, record),
            )
        else:
            await self.realtime_store.set(self._order_path(order_id), record)

        logger.info(f"Order created: {order_id}")
        return record

    async def update_order(self, order_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Apply a partial update to both stores and return the applied patch."""
        patch = {k: v for k, v in updates.items() if k not in IMMUTABLE_FIELDS}
        patch["updatedAt"] = self._timestamp()

        await self._dual_write(
            "update",
            order_id,
            self.realtime_store.update(self._order_path(order_id), patch),
            self.document_store.update(self.collection, order_id, patch),
        )
        logger.info(f"Order updated in both stores: {order_id}")
        return patch

    async def update_order_status(
        self, order_id: str, status: Union[OrderStatus, str]
    ) -> Dict[str, Any]:
        """Status-only update through the same dual-write path."""
        try:
            status = OrderStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid order status: {status}")

        return await self.update_order(order_id, {"status": status.value})

    async def delete_order(self, order_id: str) -> None:
        await self._dual_write(
            "delete",
            order_id,
            self.realtime_store.remove(self._order_path(order_id)),
            self.document_store.delete(self.collection, order_id),
        )
        logger.info(f"Order deleted from both stores: {order_id}")

    async def _dual_write(
        self,
        operation: str,
        order_id: str,
        realtime_write: Awaitable[Any],
        document_write: Awaitable[Any],
    ) -> None:
        """Run both writes concurrently; raise if either failed."""
        results = await asyncio.gather(
            realtime_write, document_write, return_exceptions=True
        )

        failures = {}
        for store, result in zip((self.realtime_store.name, self.document_store.name), results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures[store] = str(result) or result.__class__.__name__

        if failures:
            logger.error(f"Order {operation} for {order_id} failed: {failures}")
            raise DualWriteError(f"Order {operation}", failures)

    @staticmethod
    def _validate_new_order(order: Mapping[str, Any]) -> None:
        name = order.get("customerName")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Customer name is required")

        items = order.get("items")
        if not isinstance(items, (list, tuple)) or not items:
            raise ValidationError("Please add at least one item")
