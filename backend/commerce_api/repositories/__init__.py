"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from commerce_api.repositories.base import BaseRepository, apply_sorting, parse_sort_tokens
from commerce_api.repositories.order import OrderRepository
from commerce_api.repositories.order_item import OrderItemRepository
from commerce_api.repositories.order_routines import OrderLine
from commerce_api.repositories.product import ProductRepository
from commerce_api.repositories.role import RoleRepository
from commerce_api.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "apply_sorting",
    "parse_sort_tokens",
    # Domain
    "OrderLine",
    "OrderRepository",
    "OrderItemRepository",
    "ProductRepository",
    "RoleRepository",
    "UserRepository",
]
