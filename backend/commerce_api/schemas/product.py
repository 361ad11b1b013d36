"""Product Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class ProductQuerySchema(Schema):
    """Query-string filters for the product listing."""

    category = fields.String(load_default=None)
    name = fields.String(load_default=None)


class ProductInputSchema(Schema):
    """Payload for creating or replacing a product.

    Types are checked here; business rules (positive price, non-negative
    stock) are enforced by :class:`~commerce_api.services.products.ProductService`.
    """

    name = fields.String(required=True, validate=validate.Length(max=200))
    sku = fields.String(required=True, validate=validate.Length(max=64))
    price = fields.Decimal(required=True, places=2)
    stock = fields.Integer(load_default=0, strict=True)
    category = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=100))


class ProductSchema(Schema):
    """Product representation; prices are rendered as strings."""

    id = fields.Integer(dump_only=True)
    name = fields.String()
    sku = fields.String()
    price = fields.Decimal(as_string=True, places=2)
    stock = fields.Integer()
    category = fields.String(allow_none=True)
