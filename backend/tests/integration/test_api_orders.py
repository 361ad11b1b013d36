"""Integration tests for order placement and retrieval."""

from __future__ import annotations

from decimal import Decimal

from commerce_api.models import Product
from tests.factories import OrderFactory, ProductFactory
from tests.helpers.auth import expired_token
from tests.helpers.http import json_headers

ORDERS = "/api/v1/orders"


def test_place_list_and_fetch_an_order(client, session, user, auth_header) -> None:
    """
    GIVEN an authenticated buyer and a product in stock
    WHEN they place an order, list their orders and fetch it
    THEN the order carries the computed total and its items
    """
    book = ProductFactory(name="Book", price=Decimal("12.50"), stock=4)

    created = client.post(
        ORDERS,
        json={"items": [{"product_id": book.id, "quantity": 2, "unit_price": "12.50"}]},
        headers=auth_header,
    )
    assert created.status_code == 201
    order = created.get_json()["data"]
    assert order["user_id"] == user.id
    assert order["total"] == "25.00"
    assert order["items"][0]["product_name"] == "Book"

    listing = client.get(ORDERS, headers=auth_header).get_json()["data"]
    assert [(o["id"], o["total"]) for o in listing] == [(order["id"], "25.00")]
    assert "items" not in listing[0]

    fetched = client.get(f"{ORDERS}/{order['id']}", headers=auth_header)
    assert fetched.status_code == 200
    assert fetched.get_json()["data"]["items"][0]["quantity"] == 2

    session.expire_all()
    assert session.get(Product, book.id).stock == 2


def test_insufficient_stock_is_conflict(client, auth_header) -> None:
    scarce = ProductFactory(stock=1)

    resp = client.post(
        ORDERS,
        json={"items": [{"product_id": scarce.id, "quantity": 5, "unit_price": "10.00"}]},
        headers=auth_header,
    )

    assert resp.status_code == 409


def test_unknown_product_is_not_found(client, auth_header) -> None:
    resp = client.post(
        ORDERS,
        json={"items": [{"product_id": 987654, "quantity": 1, "unit_price": "10.00"}]},
        headers=auth_header,
    )

    assert resp.status_code == 404


def test_empty_items_fail_schema_validation(client, auth_header) -> None:
    resp = client.post(ORDERS, json={"items": []}, headers=auth_header)

    assert resp.status_code == 422
    assert "items" in resp.get_json()["details"]["errors"]


def test_other_users_order_is_forbidden(client, auth_header) -> None:
    foreign = OrderFactory()

    resp = client.get(f"{ORDERS}/{foreign.id}", headers=auth_header)

    assert resp.status_code == 403


def test_expired_access_token_is_rejected(client, user) -> None:
    resp = client.get(ORDERS, headers=json_headers(expired_token(user)))

    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Access token has expired"


def test_tampered_access_token_is_rejected(client) -> None:
    resp = client.get(ORDERS, headers=json_headers("not.a.jwt"))

    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Invalid access token"
