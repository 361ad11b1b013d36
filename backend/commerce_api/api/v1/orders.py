"""Order endpoints for the authenticated user."""

from __future__ import annotations

from flask import Blueprint, request

from commerce_api.api.deps import (
    current_user_id,
    json_response,
    order_service,
    require_auth,
    timing,
)
from commerce_api.schemas import OrderCreateSchema, OrderSchema, OrderSummarySchema
from commerce_api.services.orders import OrderItemIn

bp = Blueprint("orders", __name__)

create_schema = OrderCreateSchema()
order_schema = OrderSchema()
summary_schema = OrderSummarySchema()


@bp.post("")
@require_auth
@timing
def create_order():
    """Place an order for the caller; stock and total are handled atomically."""

    data = create_schema.load(request.get_json(silent=True) or {})
    items = [OrderItemIn(**item) for item in data["items"]]
    order = order_service().create(current_user_id(), items)
    return json_response({"data": order_schema.dump(order)}, status=201)


@bp.get("")
@require_auth
@timing
def list_orders():
    """List the caller's orders without items."""

    orders = order_service().list_for_user(current_user_id())
    return json_response({"data": summary_schema.dump(orders, many=True)})


@bp.get("/<int:order_id>")
@require_auth
@timing
def get_order(order_id: int):
    """Return one of the caller's orders with its items."""

    order = order_service().get(order_id, actor_id=current_user_id())
    return json_response({"data": order_schema.dump(order)})
