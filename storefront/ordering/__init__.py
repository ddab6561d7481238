"""
Ordering Module
"""
from .cart import CartEntry, CartService
from .placement import CartLine, OrderPlacement, PlacedOrder, compute_total

__all__ = [
    "CartEntry",
    "CartService",
    "CartLine",
    "OrderPlacement",
    "PlacedOrder",
    "compute_total",
]
