from decimal import Decimal

from app.models.products import Product
from app.models.sales import Sale


def _sale_payload(catalog, **overrides):
    payload = {
        "items": [
            {
                "item_kind": "product",
                "item_id": catalog["latte"].id,
                "item_name": "Latte",
                "unit_price": "20000",
                "quantity": 2,
                "add_ons": [
                    {"add_on_id": catalog["boba"].id, "name": "Boba", "unit_price": "3000"},
                ],
            }
        ],
        "payment_method": "cash",
        "total": "46000",
        "cash_amount": "50000",
    }
    payload.update(overrides)
    return payload


def _create_sale(client, headers, catalog, **overrides):
    response = client.post("/sales", json=_sale_payload(catalog, **overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_sale(client, employee_headers, catalog, db_session):
    sale = _create_sale(client, employee_headers, catalog)

    assert Decimal(sale["total"]) == Decimal("46000")
    assert Decimal(sale["change_due"]) == Decimal("4000")
    assert sale["cashier_name"] == "Rina Cashier"
    assert sale["items"][0]["add_ons"][0]["add_on_id"] == catalog["boba"].id

    db_session.expire_all()
    assert db_session.get(Product, catalog["latte"].id).stock == 8


def test_create_sale_insufficient_cash(client, employee_headers, catalog, db_session):
    response = client.post(
        "/sales",
        json=_sale_payload(catalog, cash_amount="40000"),
        headers=employee_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_PAYMENT"
    assert db_session.query(Sale).count() == 0


def test_create_sale_wrong_total(client, employee_headers, catalog):
    response = client.post(
        "/sales",
        json=_sale_payload(catalog, total="1000", cash_amount="50000"),
        headers=employee_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "TOTAL_MISMATCH"


def test_create_sale_empty_cart(client, employee_headers, catalog):
    response = client.post(
        "/sales",
        json=_sale_payload(catalog, items=[], total="0", cash_amount="0"),
        headers=employee_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "EMPTY_CART"


def _latte_line(catalog, **fields):
    line = {
        "item_id": catalog["latte"].id,
        "item_name": "Latte",
        "unit_price": "20000",
        "quantity": 1,
    }
    line.update(fields)
    return line


def test_create_sale_rejects_sub_cent_prices(client, employee_headers, catalog, db_session):
    response = client.post(
        "/sales",
        json=_sale_payload(
            catalog,
            items=[_latte_line(catalog, unit_price="0.005", quantity=2)],
            payment_method="qris",
            total="0.01",
            cash_amount=None,
        ),
        headers=employee_headers,
    )

    assert response.status_code == 422
    assert db_session.query(Sale).count() == 0


def test_create_sale_rejects_long_item_name(client, employee_headers, catalog):
    response = client.post(
        "/sales",
        json=_sale_payload(
            catalog,
            items=[_latte_line(catalog, item_name="L" * 101)],
            payment_method="qris",
            total="20000",
            cash_amount=None,
        ),
        headers=employee_headers,
    )

    assert response.status_code == 422


def test_create_sale_standalone_topping_with_toppings(client, employee_headers, catalog, db_session):
    boba, cheese = catalog["boba"], catalog["cheese"]
    response = client.post(
        "/sales",
        json=_sale_payload(
            catalog,
            items=[
                {
                    "item_kind": "topping",
                    "item_id": boba.id,
                    "item_name": "Boba",
                    "unit_price": "3000",
                    "quantity": 1,
                    "add_ons": [
                        {"add_on_id": cheese.id, "name": "Cheese Foam", "unit_price": "5000"},
                    ],
                }
            ],
            payment_method="qris",
            total="8000",
            cash_amount=None,
        ),
        headers=employee_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_CART_ITEM"
    assert db_session.query(Sale).count() == 0


def test_create_sale_unknown_item(client, employee_headers, catalog, db_session):
    response = client.post(
        "/sales",
        json=_sale_payload(
            catalog,
            items=[_latte_line(catalog, item_id=99999, unit_price="1000")],
            payment_method="qris",
            total="1000",
            cash_amount=None,
        ),
        headers=employee_headers,
    )

    assert response.status_code == 404
    assert response.json()["code"] == "CATALOG_ITEM_NOT_FOUND"
    assert db_session.query(Sale).count() == 0


def test_create_sale_requires_login(client, catalog):
    response = client.post("/sales", json=_sale_payload(catalog))

    assert response.status_code == 401


def test_request_id_makes_submit_idempotent(client, employee_headers, catalog, db_session):
    first = _create_sale(client, employee_headers, catalog, request_id="abc-123")
    second = _create_sale(client, employee_headers, catalog, request_id="abc-123")

    assert first["id"] == second["id"]
    assert db_session.query(Sale).count() == 1


def test_employee_sees_only_own_sales(
    client, employee_headers, other_employee_headers, admin_headers, catalog
):
    own = _create_sale(client, employee_headers, catalog)
    other = _create_sale(client, other_employee_headers, catalog)

    listed = client.get("/sales", headers=employee_headers).json()
    assert [s["id"] for s in listed] == [own["id"]]

    assert client.get(f"/sales/{other['id']}", headers=employee_headers).status_code == 404
    assert client.get(f"/sales/{own['id']}", headers=employee_headers).status_code == 200

    everything = client.get("/sales", headers=admin_headers).json()
    assert {s["id"] for s in everything} == {own["id"], other["id"]}


def test_admin_searches_by_cashier(client, employee_headers, other_employee_headers, admin_headers, catalog):
    _create_sale(client, employee_headers, catalog)
    budi = _create_sale(client, other_employee_headers, catalog)

    listed = client.get("/sales", params={"search": "budi"}, headers=admin_headers).json()

    assert [s["id"] for s in listed] == [budi["id"]]


def test_custom_period_requires_start_date(client, admin_headers):
    response = client.get("/sales", params={"period": "custom"}, headers=admin_headers)

    assert response.status_code == 400


def test_custom_period_outside_range_is_empty(client, employee_headers, admin_headers, catalog):
    _create_sale(client, employee_headers, catalog)

    response = client.get(
        "/sales",
        params={"period": "custom", "start_date": "2001-01-01", "end_date": "2001-01-31"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == []


def test_receipt(client, employee_headers, catalog, store):
    sale = _create_sale(
        client,
        employee_headers,
        catalog,
        items=[
            {
                "item_id": catalog["latte"].id,
                "item_name": "Latte",
                "unit_price": "20000",
                "quantity": 2,
                "note": "less sugar",
                "add_ons": [
                    {"add_on_id": catalog["boba"].id, "name": "Boba", "unit_price": "3000"},
                ],
            }
        ],
    )

    response = client.get(f"/sales/{sale['id']}/receipt", headers=employee_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    text = response.text
    assert "Kopi Senja" in text
    assert f"No: {str(sale['id']).zfill(8)}" in text
    assert "Cashier: Rina Cashier" in text
    assert "2 x 20.000" in text
    assert "+ Boba" in text
    assert "Note: less sugar" in text
    assert "Rp 46.000" in text
    assert "PAID (Cash)" in text
    assert "Rp 4.000" in text


def test_admin_deletes_sale(client, employee_headers, admin_headers, catalog):
    sale = _create_sale(client, employee_headers, catalog)

    assert client.delete(f"/sales/{sale['id']}", headers=employee_headers).status_code == 403
    assert client.delete(f"/sales/{sale['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/sales/{sale['id']}", headers=admin_headers).status_code == 404
