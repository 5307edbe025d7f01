#import all models so SQLAlchemy registers them in Base.metadata

from storecart.data.models.cart import CartModel, CartStatus
from storecart.data.models.cart_item import CartItemModel

__all__ = ["CartModel", "CartStatus", "CartItemModel"]
