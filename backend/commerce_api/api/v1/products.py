"""Product catalogue endpoints; writes require the ``Admin`` role."""

from __future__ import annotations

from flask import Blueprint, request

from commerce_api.api.deps import json_response, product_service, require_role, timing
from commerce_api.models.role import ADMIN_ROLE_NAME
from commerce_api.schemas import ProductInputSchema, ProductQuerySchema, ProductSchema
from commerce_api.services.products import ProductIn

bp = Blueprint("products", __name__)

query_schema = ProductQuerySchema()
input_schema = ProductInputSchema()
product_schema = ProductSchema()


@bp.get("")
@timing
def list_products():
    """List products, optionally filtered by ``category`` and ``name``."""

    args = query_schema.load(request.args)
    products = product_service().list(category=args["category"], name=args["name"])
    return json_response({"data": product_schema.dump(products, many=True)})


@bp.get("/<int:product_id>")
@timing
def get_product(product_id: int):
    return json_response({"data": product_schema.dump(product_service().get(product_id))})


@bp.post("")
@require_role(ADMIN_ROLE_NAME)
@timing
def create_product():
    data = input_schema.load(request.get_json(silent=True) or {})
    product = product_service().create(ProductIn(**data))
    return json_response({"data": product_schema.dump(product)}, status=201)


@bp.put("/<int:product_id>")
@require_role(ADMIN_ROLE_NAME)
@timing
def update_product(product_id: int):
    data = input_schema.load(request.get_json(silent=True) or {})
    product = product_service().update(product_id, ProductIn(**data))
    return json_response({"data": product_schema.dump(product)})


@bp.delete("/<int:product_id>")
@require_role(ADMIN_ROLE_NAME)
@timing
def delete_product(product_id: int):
    product_service().delete(product_id)
    return json_response({"message": f"Product {product_id} deleted"})
