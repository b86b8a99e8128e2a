# backend/modules/orders/tests/test_order_routes.py

"""
API tests for the orders endpoints and the live orders socket.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

ORDER_PAYLOAD = {
    "customerName": "Ravi",
    "customerPhone": "555-0101",
    "items": [{"name": "Biryani", "price": 12.5, "quantity": 2}],
    "delivery": 3,
}


def create_order(client, headers=None):
    response = client.post("/orders", json=ORDER_PAYLOAD, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestOrderEndpoints:
    def test_requires_token(self, client):
        response = client.get("/orders")
        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTH_FAILED"

    def test_rejects_non_admin(self, client, auth_provider):
        auth_provider.accounts["guest"] = {"email": "guest@example.com"}
        token = auth_provider.issue_token("guest")

        response = client.get("/orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403
        assert response.json()["detail"] == "You are not registered. Please contact administrator"

    def test_create_and_fetch(self, client, auth_headers):
        order = create_order(client, auth_headers)

        assert order["id"].startswith("order_")
        assert order["total"] == 28
        assert order["status"] == "confirmed"

        response = client.get(f"/orders/{order['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["customerName"] == "Ravi"

    def test_create_validation(self, admin_client):
        response = admin_client.post("/orders", json={**ORDER_PAYLOAD, "items": []})
        assert response.status_code == 422

    def test_create_rejects_total_below_items(self, admin_client):
        response = admin_client.post("/orders", json={**ORDER_PAYLOAD, "total": 5})
        assert response.status_code == 422

    def test_list_from_both_sources(self, admin_client):
        order = create_order(admin_client)

        realtime = admin_client.get("/orders").json()
        documents = admin_client.get("/orders", params={"source": "documents"}).json()

        assert [o["id"] for o in realtime] == [order["id"]]
        assert [o["id"] for o in documents] == [order["id"]]

    def test_status_update(self, admin_client, document_store):
        order = create_order(admin_client)

        response = admin_client.patch(
            f"/orders/{order['id']}/status", json={"status": "completed"}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_status_update_rejects_unknown_status(self, admin_client):
        order = create_order(admin_client)
        response = admin_client.patch(f"/orders/{order['id']}/status", json={"status": "lost"})
        assert response.status_code == 422

    def test_update_fields(self, admin_client):
        order = create_order(admin_client)

        response = admin_client.patch(
            f"/orders/{order['id']}", json={"notes": "No onions", "deliveryAddress": "12 Hill Rd"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["notes"] == "No onions"
        assert body["deliveryAddress"] == "12 Hill Rd"

    def test_update_rejects_total_below_stored_items(self, admin_client):
        order = create_order(admin_client)

        response = admin_client.patch(f"/orders/{order['id']}", json={"total": 1})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert admin_client.get(f"/orders/{order['id']}").json()["total"] == 28

    def test_update_accepts_total_covering_items(self, admin_client):
        order = create_order(admin_client)

        response = admin_client.patch(f"/orders/{order['id']}", json={"total": 30})

        assert response.status_code == 200
        assert response.json()["total"] == 30

    def test_update_items_recomputes_total(self, admin_client, document_store):
        order = create_order(admin_client)

        response = admin_client.patch(
            f"/orders/{order['id']}",
            json={"items": [{"name": "Thali", "price": 100, "quantity": 3}]},
        )

        assert response.status_code == 200
        assert response.json()["total"] == 303
        assert document_store._collection("orders")[order["id"]]["total"] == 303

    def test_update_delivery_recomputes_total(self, admin_client):
        order = create_order(admin_client)

        response = admin_client.patch(f"/orders/{order['id']}", json={"delivery": 0})

        assert response.json()["total"] == 25

    @pytest.mark.parametrize("field", ["customerName", "items", "status"])
    def test_update_rejects_null_required_field(self, admin_client, field):
        order = create_order(admin_client)

        response = admin_client.patch(f"/orders/{order['id']}", json={field: None})

        assert response.status_code == 422
        assert admin_client.get(f"/orders/{order['id']}").json()["customerName"] == "Ravi"

    def test_missing_order(self, admin_client):
        assert admin_client.get("/orders/order_0_missing").status_code == 404
        response = admin_client.patch("/orders/order_0_missing/status", json={"status": "ready"})
        assert response.status_code == 404
        assert admin_client.patch("/orders/order_0_missing", json={"notes": "x"}).status_code == 404
        assert admin_client.delete("/orders/order_0_missing").status_code == 404

    def test_delete(self, admin_client):
        order = create_order(admin_client)

        response = admin_client.delete(f"/orders/{order['id']}")

        assert response.json() == {"id": order["id"], "deleted": True}
        assert admin_client.get(f"/orders/{order['id']}").status_code == 404

    def test_dual_write_failure_response(self, admin_client, document_store):
        order = create_order(admin_client)
        document_store._collection("orders").pop(order["id"])

        response = admin_client.patch(f"/orders/{order['id']}/status", json={"status": "ready"})

        assert response.status_code == 502
        body = response.json()
        assert body["error_code"] == "DUAL_WRITE_FAILED"
        assert set(body["failures"]) == {"document"}

    def test_state_mirrors_orders(self, admin_client):
        order = create_order(admin_client)
        admin_client.patch(f"/orders/{order['id']}/status", json={"status": "preparing"})

        state = admin_client.get("/session/state").json()

        assert [o["id"] for o in state["orders"]["items"]] == [order["id"]]
        assert state["orders"]["items"][0]["status"] == "preparing"
        assert state["orders"]["isLoading"] is False


class TestLiveOrders:
    def test_rejects_missing_token(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/orders/live") as websocket:
                websocket.receive_json()

    def test_pushes_order_list(self, client, registered_admin, auth_headers):
        _, token = registered_admin
        with client.websocket_connect(f"/orders/live?token={token}") as websocket:
            assert websocket.receive_json() == {"type": "orders", "orders": []}

            order = create_order(client, auth_headers)

            message = websocket.receive_json()
            assert message["type"] == "orders"
            assert [o["id"] for o in message["orders"]] == [order["id"]]

    def test_pushes_single_order(self, client, registered_admin, auth_headers):
        _, token = registered_admin
        order = create_order(client, auth_headers)

        with client.websocket_connect(
            f"/orders/live?token={token}&order_id={order['id']}"
        ) as websocket:
            assert websocket.receive_json()["order"]["id"] == order["id"]

            client.delete(f"/orders/{order['id']}", headers=auth_headers)

            assert websocket.receive_json() == {"type": "order", "order": None}
