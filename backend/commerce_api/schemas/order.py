"""Order Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class OrderItemInputSchema(Schema):
    product_id = fields.Integer(required=True, strict=True)
    quantity = fields.Integer(required=True, strict=True)
    unit_price = fields.Decimal(required=True, places=2)


class OrderCreateSchema(Schema):
    """Payload for placing an order; the buyer comes from the access token."""

    items = fields.List(
        fields.Nested(OrderItemInputSchema),
        required=True,
        validate=validate.Length(min=1, error="At least one item is required."),
    )


class OrderItemSchema(Schema):
    id = fields.Integer()
    product_id = fields.Integer()
    product_name = fields.String()
    quantity = fields.Integer()
    unit_price = fields.Decimal(as_string=True, places=2)


class OrderSummarySchema(Schema):
    """Order listing entry (no items)."""

    id = fields.Integer()
    user_id = fields.Integer()
    total = fields.Decimal(as_string=True, places=2)
    created_at = fields.DateTime(allow_none=True)


class OrderSchema(OrderSummarySchema):
    """Order with its items."""

    items = fields.List(fields.Nested(OrderItemSchema))
