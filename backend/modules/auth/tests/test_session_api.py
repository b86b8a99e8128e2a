# backend/modules/auth/tests/test_session_api.py

from unittest.mock import AsyncMock, patch

from core.exceptions import StoreError


def test_load_fills_every_slice(client, auth_headers):
    client.post(
        "/menu/items",
        json={"name": "Samosa", "price": 3, "category": "Appetizer"},
        headers=auth_headers,
    )

    state = client.post("/session/load", headers=auth_headers).json()

    assert state["profile"]["data"]["name"] == "Owner"
    assert [i["name"] for i in state["menu"]["items"]] == ["Samosa"]
    assert state["orders"]["items"] == []
    assert state["dashboard"]["data"]["totalOrders"] == 0
    for name in ("profile", "menu", "orders", "dashboard"):
        assert state[name]["isLoading"] is False
        assert state[name]["error"] is None
        assert state[name]["lastFetched"] is not None


def test_load_tolerates_a_failing_slice(app, client, auth_headers):
    with patch.object(
        app.state.menu_service,
        "get_menu_items",
        AsyncMock(side_effect=StoreError("menus unavailable")),
    ):
        response = client.post("/session/load", headers=auth_headers)

    state = response.json()
    assert response.status_code == 200
    assert state["menu"]["error"] == "menus unavailable"
    assert state["menu"]["isLoading"] is False
    assert state["profile"]["data"]["email"] == "owner@example.com"
    assert state["dashboard"]["lastFetched"] is not None


def test_sign_out_clears_state_and_revokes_token(client, auth_headers):
    client.post("/session/load", headers=auth_headers)

    response = client.post("/session/sign-out", headers=auth_headers)

    assert response.json() == {"signed_out": True}
    assert client.get("/session/state", headers=auth_headers).status_code == 401
