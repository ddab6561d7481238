"""
API Routes Module
"""
from .health import router as health_router
from .products import router as products_router
from .auth import router as auth_router
from .cart import router as cart_router
from .orders import router as orders_router

__all__ = [
    "health_router",
    "products_router",
    "auth_router",
    "cart_router",
    "orders_router",
]
