from app.core.changes import change_feed
from app.models.sales import Sale
from app.models.users import User

SETUP_PAYLOAD = {
    "name": "Sari Owner",
    "username": "sari",
    "password": "rahasia123",
    "store_name": "Kopi Senja",
    "address": "Jl. Merdeka 10",
    "phone": "081234567890",
    "owner": "Sari",
}


def test_first_time_setup_creates_admin_and_store(client):
    assert client.get("/setup/status").json() == {"first_time": True}

    response = client.post("/setup", json=SETUP_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["role"] == "admin"
    assert body["token_type"] == "bearer"

    headers = {"Authorization": f"Bearer {body['access_token']}"}
    store = client.get("/settings", headers=headers).json()
    assert store["store_name"] == "Kopi Senja"
    assert store["profit_percentage"] == 30

    assert client.get("/setup/status").json() == {"first_time": False}


def test_setup_only_runs_once(client):
    client.post("/setup", json=SETUP_PAYLOAD)

    response = client.post("/setup", json={**SETUP_PAYLOAD, "username": "other"})

    assert response.status_code == 409


def test_login_and_me(client):
    client.post("/setup", json=SETUP_PAYLOAD)

    response = client.post(
        "/auth/login",
        data={"username": "sari", "password": "rahasia123"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "sari"


def test_login_wrong_password(client):
    client.post("/setup", json=SETUP_PAYLOAD)

    response = client.post(
        "/auth/login",
        data={"username": "sari", "password": "wrong-password"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username or password"


def test_invalid_token_is_rejected(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_factory_reset_wipes_data(client, admin_headers, employee_headers, catalog, db_session):
    client.post("/checkout/items", json={"item_id": catalog["latte"].id}, headers=employee_headers)
    client.post(
        "/sales",
        json={
            "items": [
                {"item_id": catalog["latte"].id, "item_name": "Latte", "unit_price": "20000", "quantity": 1}
            ],
            "payment_method": "qris",
            "total": "20000",
        },
        headers=employee_headers,
    )
    since = change_feed.version

    assert client.post("/setup/factory-reset", headers=employee_headers).status_code == 403

    response = client.post("/setup/factory-reset", headers=admin_headers)

    assert response.status_code == 204
    assert db_session.query(Sale).count() == 0
    assert db_session.query(User).count() == 0
    assert client.get("/setup/status").json() == {"first_time": True}
    assert any(e.collection == "all" for e in change_feed.since(since))


def test_admin_manages_users(client, admin_headers, admin_user):
    response = client.post(
        "/users",
        json={"name": "New Cashier", "username": "cashier1", "password": "secret123"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    user_id = response.json()["id"]
    assert response.json()["role"] == "employee"

    duplicate = client.post(
        "/users",
        json={"name": "Copy", "username": "cashier1", "password": "secret123"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    updated = client.put(f"/users/{user_id}", json={"name": "Renamed"}, headers=admin_headers)
    assert updated.json()["name"] == "Renamed"

    assert client.delete(f"/users/{admin_user.id}", headers=admin_headers).status_code == 400
    assert client.delete(f"/users/{user_id}", headers=admin_headers).status_code == 204


def test_employee_cannot_manage_users(client, employee_headers):
    response = client.get("/users", headers=employee_headers)

    assert response.status_code == 403
