from .dto import OrderItemIn, OrderItemOut, OrderOut, OrderSummaryOut
from .service import OrderService

__all__ = ["OrderItemIn", "OrderItemOut", "OrderOut", "OrderService", "OrderSummaryOut"]
