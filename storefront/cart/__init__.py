"""Cart package: models and the profile-backed cart store."""
from .models import CartItem, Cart, CartSnapshot
from .service import CartStore

__all__ = [
    "CartItem",
    "Cart",
    "CartSnapshot",
    "CartStore",
]
