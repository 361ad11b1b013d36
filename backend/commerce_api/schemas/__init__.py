"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AuthResultSchema, LoginSchema, RefreshTokenSchema
from .order import OrderCreateSchema, OrderItemInputSchema, OrderItemSchema, OrderSchema, OrderSummarySchema
from .product import ProductInputSchema, ProductQuerySchema, ProductSchema
from .user import RegisterSchema, UserSchema

__all__ = [
    "AuthResultSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "OrderCreateSchema",
    "OrderItemInputSchema",
    "OrderItemSchema",
    "OrderSchema",
    "OrderSummarySchema",
    "ProductInputSchema",
    "ProductQuerySchema",
    "ProductSchema",
    "RegisterSchema",
    "UserSchema",
]
