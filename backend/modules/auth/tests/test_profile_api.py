# backend/modules/auth/tests/test_profile_api.py

def test_signup_then_use_token(client, auth_provider):
    response = client.post(
        "/profile/signup",
        json={
            "email": "new@example.com",
            "password": "hunter22",
            "name": "New Admin",
            "restaurantName": "Curry Leaf",
        },
    )
    assert response.status_code == 201
    uid = response.json()["uid"]

    token = auth_provider.issue_token(uid)
    profile = client.get("/profile", headers={"Authorization": f"Bearer {token}"})

    assert profile.status_code == 200
    assert profile.json()["restaurantName"] == "Curry Leaf"


def test_signup_rejects_bad_email(client):
    response = client.post(
        "/profile/signup",
        json={"email": "not-an-email", "password": "hunter22", "name": "X"},
    )
    assert response.status_code == 422


def test_signup_duplicate_email(client, registered_admin):
    response = client.post(
        "/profile/signup",
        json={"email": "owner@example.com", "password": "hunter22", "name": "Again"},
    )
    assert response.status_code == 409


def test_get_profile(client, auth_headers):
    response = client.get("/profile", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Owner"


def test_update_profile(client, auth_headers):
    response = client.patch(
        "/profile", json={"restaurantPhone": "555-0111"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["restaurantPhone"] == "555-0111"
    assert response.json()["restaurantName"] == "Spice Route"


def test_update_profile_email_rejected(client, auth_headers):
    response = client.patch(
        "/profile", json={"email": "someone@else.com"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Email cannot be changed"


def test_invalid_token(client):
    response = client.get("/profile", headers={"Authorization": "Bearer forged"})
    assert response.status_code == 401
