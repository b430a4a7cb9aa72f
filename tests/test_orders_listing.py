from decimal import Decimal

from sqlalchemy import update

from storefront.models import Order
from storefront.status import OrderStatus


def _set_status(db, order_id, status):
    db.execute(update(Order).where(Order.id == order_id).values(status=status))
    db.commit()


def test_list_requires_admin(client):
    assert client.get("/api/orders").status_code == 401


def test_list_orders_with_customer_and_items(client, create_order, admin_headers):
    first = create_order()
    second = create_order()

    res = client.get("/api/orders", headers=admin_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 2, "pages": 1}
    # newest first
    assert [o["id"] for o in body["orders"]] == [second["id"], first["id"]]

    row = body["orders"][0]
    assert row["customer"] == {"name": "Ana López", "email": "ana.lopez@gmail.com", "phone": "5512345678"}
    assert len(row["items"]) == 1
    assert row["items"][0]["name"] == "Ring"
    assert row["items"][0]["quantity"] == 2
    assert Decimal(row["items"][0]["price"]) == Decimal("1000.00")


def test_pagination(client, create_order, admin_headers):
    ids = [create_order()["id"] for _ in range(5)]

    res = client.get("/api/orders", params={"page": 2, "limit": 2}, headers=admin_headers)
    body = res.json()
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}
    assert [o["id"] for o in body["orders"]] == [ids[2], ids[1]]

    last = client.get("/api/orders", params={"page": 3, "limit": 2}, headers=admin_headers).json()
    assert [o["id"] for o in last["orders"]] == [ids[0]]


def test_bad_pagination_params(client, admin_headers):
    assert client.get("/api/orders", params={"page": 0}, headers=admin_headers).status_code == 400
    assert client.get("/api/orders", params={"limit": 1000}, headers=admin_headers).status_code == 400


def test_pending_filter_includes_legacy_rows(client, db, create_order, admin_headers):
    legacy = create_order()
    current = create_order()
    confirmed = create_order()
    _set_status(db, legacy["id"], OrderStatus.PENDING)
    _set_status(db, confirmed["id"], OrderStatus.CONFIRMED)

    for value in ("pending", "sent_to_whatsapp"):
        body = client.get("/api/orders", params={"status": value}, headers=admin_headers).json()
        assert {o["id"] for o in body["orders"]} == {legacy["id"], current["id"]}
        assert body["pagination"]["total"] == 2

    body = client.get("/api/orders", params={"status": "confirmed"}, headers=admin_headers).json()
    assert [o["id"] for o in body["orders"]] == [confirmed["id"]]


def test_unknown_status_filter(client, admin_headers):
    res = client.get("/api/orders", params={"status": "paid"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["details"][0]["field"] == "status"
