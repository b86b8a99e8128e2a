# backend/modules/menu/tests/test_menu_api.py

NEW_ITEM = {
    "name": "Masala Dosa",
    "description": "Rice crepe with potato filling",
    "category": "Main Course",
    "price": 9,
    "isVeg": True,
}


def test_menu_crud(admin_client):
    created = admin_client.post("/menu/items", json=NEW_ITEM)
    assert created.status_code == 201
    item = created.json()
    assert item["isVeg"] is True

    listed = admin_client.get("/menu/items").json()
    assert [i["id"] for i in listed] == [item["id"]]

    updated = admin_client.patch(f"/menu/items/{item['id']}", json={"price": 10.5})
    assert updated.json()["price"] == 10.5

    assert admin_client.delete(f"/menu/items/{item['id']}").status_code == 204
    assert admin_client.get(f"/menu/items/{item['id']}").status_code == 404


def test_filter_by_category(admin_client):
    admin_client.post("/menu/items", json=NEW_ITEM)
    admin_client.post("/menu/items", json={**NEW_ITEM, "name": "Lassi", "category": "Beverage"})

    drinks = admin_client.get("/menu/items", params={"category": "Beverage"}).json()

    assert [i["name"] for i in drinks] == ["Lassi"]


def test_missing_name_rejected(admin_client):
    response = admin_client.post("/menu/items", json={**NEW_ITEM, "name": " "})
    assert response.status_code == 422


def test_menu_slice_follows_changes(admin_client):
    admin_client.get("/menu/items")
    item = admin_client.post("/menu/items", json=NEW_ITEM).json()
    admin_client.patch(f"/menu/items/{item['id']}", json={"price": 11})

    menu = admin_client.get("/session/state").json()["menu"]

    assert menu["isAdding"] is False
    assert menu["items"][0]["price"] == 11

    admin_client.delete(f"/menu/items/{item['id']}")
    assert admin_client.get("/session/state").json()["menu"]["items"] == []


def test_update_missing_item(admin_client):
    response = admin_client.patch("/menu/items/ghost", json={"price": 1})
    assert response.status_code == 404
    assert admin_client.get("/session/state").json()["menu"]["error"] == "Menu item not found"
