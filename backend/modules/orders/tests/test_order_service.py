# backend/modules/orders/tests/test_order_service.py

"""
Tests for order reads and live subscriptions.
"""

import pytest

from core.memory_store import InMemoryDocumentStore, InMemoryRealtimeStore
from modules.orders.services.order_service import OrderService
from modules.orders.services.sync_service import OrderSyncService


@pytest.fixture
def stores():
    return InMemoryRealtimeStore(), InMemoryDocumentStore()


@pytest.fixture
def order_service(stores, test_settings):
    return OrderService(*stores, test_settings)


@pytest.fixture
def sync_service(stores, test_settings):
    return OrderSyncService(*stores, test_settings)


def new_order(name, order_date="2024-03-01T10:00:00Z"):
    return {
        "customerName": name,
        "items": [{"name": "Tea", "price": 2, "quantity": 1}],
        "orderDate": order_date,
    }


@pytest.mark.asyncio
async def test_list_orders_newest_created_first(order_service, sync_service):
    first = await sync_service.create_order(new_order("First"))
    second = await sync_service.create_order(new_order("Second"))

    orders = await order_service.list_orders()

    assert [o.id for o in orders] == [second["id"], first["id"]]
    assert orders[0].total == 2
    assert orders[0].status == "confirmed"


@pytest.mark.asyncio
async def test_list_orders_empty_tree(order_service):
    assert await order_service.list_orders() == []


@pytest.mark.asyncio
async def test_legacy_records_are_normalized(order_service, stores):
    realtime_store, _ = stores
    await realtime_store.set(
        "orders/legacy1",
        {"currentStatusIndex": 4, "items": [{"price": 10, "quantity": 2}], "delivery": 5},
    )

    order = await order_service.get_order("legacy1")

    assert order.id == "legacy1"
    assert order.customer_name == "Unknown"
    assert order.status == "completed"
    assert order.total == 25


@pytest.mark.asyncio
async def test_get_missing_order(order_service):
    assert await order_service.get_order("nope") is None


@pytest.mark.asyncio
async def test_document_orders_sorted_by_order_date(order_service, stores):
    _, document_store = stores
    await document_store.set("orders", "a", {"customerName": "A", "orderDate": "2024-03-01T00:00:00Z"})
    await document_store.set("orders", "b", {"customerName": "B", "orderDate": "2024-03-05T00:00:00Z"})
    await document_store.set("orders", "c", {"customerName": "C"})

    orders = await order_service.list_document_orders()

    assert [o.id for o in orders] == ["b", "a", "c"]


@pytest.mark.asyncio
async def test_subscription_follows_writes(order_service, sync_service):
    updates = []
    unsubscribe = order_service.subscribe_to_orders(updates.append)

    assert updates == [[]]

    record = await sync_service.create_order(new_order("Live"))
    await sync_service.update_order_status(record["id"], "ready")

    assert updates[-1][0].id == record["id"]
    assert updates[-1][0].status == "ready"

    unsubscribe()
    seen = len(updates)
    await sync_service.delete_order(record["id"])
    assert len(updates) == seen


@pytest.mark.asyncio
async def test_single_order_subscription(order_service, sync_service):
    record = await sync_service.create_order(new_order("One"))
    seen = []
    unsubscribe = order_service.subscribe_to_order(record["id"], seen.append)

    await sync_service.update_order(record["id"], {"notes": "extra spicy"})
    await sync_service.delete_order(record["id"])
    unsubscribe()

    assert seen[0].customer_name == "One"
    assert seen[1].notes == "extra spicy"
    assert seen[-1] is None


@pytest.mark.asyncio
async def test_callback_errors_go_to_error_handler(order_service, sync_service):
    errors = []

    def broken(orders):
        raise RuntimeError("render failed")

    unsubscribe = order_service.subscribe_to_orders(broken, errors.append)
    await sync_service.create_order(new_order("X"))
    unsubscribe()

    assert errors
    assert all(isinstance(e, RuntimeError) for e in errors)
