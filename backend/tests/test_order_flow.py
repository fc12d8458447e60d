import logging

import pytest
from fastapi.testclient import TestClient

from shopcart.db import SessionLocal
from shopcart.main import app
from shopcart.models.cart_item import STATUS_ACTIVE, CartItem
from shopcart.models.order import Order
from shopcart.repositories.cart_repo import CartRepository
from shopcart.services.cart_service import CartService
from shopcart.services.exceptions import Conflict, EmptyCart, InternalFailure, NotFound
from shopcart.services.order_service import OrderService, summarize_quantities

client = TestClient(app)


def _fill_cart(db, user, plan):
    svc = CartService(db)
    for product, qty in plan:
        for _ in range(qty):
            svc.add_item(user.id, product.id)


def test_buy_now_creates_snapshot_order(db, user, products):
    svc = OrderService(db)
    order = svc.buy_now(user.id, products[0].id, "1 High Street", "07700900000")

    assert order.order_number.startswith("ORD-")
    assert order.product_id == products[0].id
    assert order.total_quantity == 1
    assert order.user_details == {"username": "shopper", "email": "shopper@example.com"}
    assert order.product_details[0]["name"] == "Green Tea"
    assert order.product_details[0]["quantity"] == 1


def test_buy_now_twice_conflicts_and_keeps_one_order(db, user, products):
    svc = OrderService(db)
    svc.buy_now(user.id, products[0].id, "1 High Street", "07700900000")
    with pytest.raises(Conflict):
        svc.buy_now(user.id, products[0].id, "1 High Street", "07700900000")
    assert db.query(Order).filter(Order.user_id == user.id).count() == 1


def test_buy_now_duplicate_committed_concurrently_is_a_conflict(db, user, products, monkeypatch):
    user_id, product_id = user.id, products[0].id
    real_gen = OrderService._gen_order_number

    def gen_after_concurrent_buy(self):
        # a second request commits the same buy-now after the existence check
        other = SessionLocal()
        try:
            other.add(
                Order(
                    order_number="ORD-CONCURRENT",
                    user_id=user_id,
                    product_id=product_id,
                    total_quantity=1,
                    user_details={},
                    product_details=[],
                )
            )
            other.commit()
        finally:
            other.close()
        return real_gen(self)

    monkeypatch.setattr(OrderService, "_gen_order_number", gen_after_concurrent_buy)
    with pytest.raises(Conflict, match="already exists"):
        OrderService(db).buy_now(user_id, product_id, "1 High Street", "07700900000")

    orders = db.query(Order).filter(Order.user_id == user_id).all()
    assert [o.order_number for o in orders] == ["ORD-CONCURRENT"]


def test_buy_now_missing_product_or_user(db, user, products):
    svc = OrderService(db)
    with pytest.raises(NotFound, match="Product not found"):
        svc.buy_now(user.id, 9999, "addr", "123")
    with pytest.raises(NotFound, match="User not found"):
        svc.buy_now(9999, products[0].id, "addr", "123")


def test_buy_now_api(user, products):
    payload = {
        "user_id": user.id,
        "product_id": products[1].id,
        "address": "1 High Street",
        "mobile_no": "07700900000",
    }
    r = client.post("/api/orders/buy-now", json=payload)
    assert r.status_code == 200
    order = r.json()["data"]["order"]
    assert order["product_id"] == products[1].id

    r2 = client.post("/api/orders/buy-now", json=payload)
    assert r2.status_code == 409
    assert r2.json() == {"detail": "Order for this product already exists."}


def test_cart_order_on_empty_cart(db, user):
    svc = OrderService(db)
    with pytest.raises(EmptyCart):
        svc.place_cart_order(user.id, "07700900000", "1 High Street")
    assert db.query(Order).count() == 0


def test_cart_order_missing_user(db):
    with pytest.raises(NotFound, match="User not found"):
        OrderService(db).place_cart_order(9999, "07700900000", "1 High Street")


def test_cart_order_aggregates_categories_and_clears_cart(db, user, products):
    _fill_cart(db, user, [(products[0], 2), (products[1], 3)])

    order = OrderService(db).place_cart_order(user.id, "07700900000", "1 High Street")

    assert order.total_quantity == 5
    assert order.category_quantities == {"drinks": 2, "stationery": 3}
    assert order.product_id is None
    assert sorted(line["quantity"] for line in order.product_details) == [2, 3]
    assert db.query(CartItem).filter(CartItem.user_id == user.id).count() == 0


def test_cart_order_skips_uncategorized_in_category_totals(db, user, products, caplog):
    _fill_cart(db, user, [(products[0], 1), (products[2], 2)])

    with caplog.at_level(logging.WARNING, logger="shopcart.orders"):
        order = OrderService(db).place_cart_order(user.id, "07700900000", "addr")

    assert order.category_quantities == {"drinks": 1}
    assert order.total_quantity == 3
    assert "No category found" in caplog.text


def test_cart_order_ignores_removed_items_but_clears_them(db, user, products):
    _fill_cart(db, user, [(products[0], 1), (products[1], 1)])
    CartService(db).remove_item(user.id, products[1].id)

    order = OrderService(db).place_cart_order(user.id, "07700900000", "addr")

    assert [line["product_id"] for line in order.product_details] == [products[0].id]
    assert db.query(CartItem).filter(CartItem.user_id == user.id).count() == 0


def test_order_snapshot_survives_product_change(db, user, products):
    _fill_cart(db, user, [(products[0], 1)])
    order = OrderService(db).place_cart_order(user.id, "07700900000", "addr")
    order_id = order.id

    products[0].price_cents = 12345
    products[0].name = "Renamed Tea"
    db.commit()

    stored = OrderService(db).get_order(order_id)
    assert stored.product_details[0]["price_cents"] == 300
    assert stored.product_details[0]["name"] == "Green Tea"


def test_cart_order_rolls_back_when_cart_clear_fails(db, user, products, monkeypatch):
    _fill_cart(db, user, [(products[0], 2)])

    def boom(self, user_id, item_ids):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(CartRepository, "delete_checked_out", boom)
    with pytest.raises(InternalFailure):
        OrderService(db).place_cart_order(user.id, "07700900000", "addr")

    assert db.query(Order).count() == 0
    assert db.query(CartItem).filter(CartItem.user_id == user.id).count() == 1


def test_checkout_keeps_item_added_while_order_is_built(db, user, products, monkeypatch):
    _fill_cart(db, user, [(products[0], 1)])
    user_id, ordered_id, late_id = user.id, products[0].id, products[1].id
    real_list = CartRepository.list_for_user
    fired = []

    def list_then_concurrent_add(self, uid, include_deleted=True):
        items = real_list(self, uid, include_deleted=include_deleted)
        if not fired:
            fired.append(True)
            other = SessionLocal()
            try:
                CartService(other).add_item(user_id, late_id)
            finally:
                other.close()
        return items

    monkeypatch.setattr(CartRepository, "list_for_user", list_then_concurrent_add)
    order = OrderService(db).place_cart_order(user_id, "07700900000", "addr")

    assert [line["product_id"] for line in order.product_details] == [ordered_id]
    left = db.query(CartItem).filter(CartItem.user_id == user_id).all()
    assert [(i.product_id, i.quantity, i.status) for i in left] == [(late_id, 1, STATUS_ACTIVE)]


def test_checkout_api(user, products):
    client.post(f"/api/cart/{user.id}/items", json={"product_id": products[0].id})
    client.post(f"/api/cart/{user.id}/items", json={"product_id": products[0].id})
    client.post(f"/api/cart/{user.id}/items", json={"product_id": products[1].id})

    r = client.post(
        "/api/orders/checkout",
        json={"user_id": user.id, "address": "1 High Street", "mobile_no": "07700900000"},
    )
    assert r.status_code == 200
    order = r.json()["data"]["order"]
    assert order["total_quantity"] == 3
    assert order["category_quantities"] == {"drinks": 2, "stationery": 1}

    r = client.get(f"/api/cart/{user.id}")
    assert r.json()["data"]["items"] == []

    r = client.post(
        "/api/orders/checkout",
        json={"user_id": user.id, "address": "1 High Street", "mobile_no": "07700900000"},
    )
    assert r.status_code == 400
    assert r.json() == {"detail": "Cart is empty."}


def test_get_and_list_orders_api(user, products):
    r = client.post(
        "/api/orders/buy-now",
        json={
            "user_id": user.id,
            "product_id": products[0].id,
            "address": "addr",
            "mobile_no": "123",
        },
    )
    order_id = r.json()["data"]["order"]["id"]

    r = client.get(f"/api/orders/{order_id}")
    assert r.status_code == 200
    assert r.json()["data"]["order"]["id"] == order_id

    r = client.get("/api/orders", params={"user_id": user.id})
    assert [o["id"] for o in r.json()["data"]["orders"]] == [order_id]

    assert client.get("/api/orders/9999").status_code == 404


def test_summarize_quantities():
    lines = [
        {"product_id": 1, "quantity": 2, "category": "a"},
        {"product_id": 2, "quantity": 3, "category": "b"},
        {"product_id": 3, "quantity": 1, "category": "a"},
        {"product_id": 4, "quantity": 4, "category": None},
    ]
    total, by_category, uncategorized = summarize_quantities(lines)
    assert total == 10
    assert by_category == {"a": 3, "b": 3}
    assert uncategorized == [4]


def test_list_orders_api_store_failure_uses_failure_body(user, monkeypatch):
    def boom(self, user_id):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(OrderService, "list_orders", boom)
    r = client.get("/api/orders", params={"user_id": user.id})
    assert r.status_code == 500
    assert r.json() == {"detail": "An error occurred while fetching orders."}
