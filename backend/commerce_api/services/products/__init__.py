from .dto import ProductIn, ProductOut
from .service import ProductService

__all__ = ["ProductIn", "ProductOut", "ProductService"]
