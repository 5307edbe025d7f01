# storecart/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from uuid import UUID


class AddToCartIn(BaseModel):
    """Body of add-to-cart."""

    product_id: int = Field(..., gt=0, description="Product offering id in the store")
    quantity: int = Field(..., ge=1, description="Quantity to add (>= 1)")


class UpdateQuantityIn(BaseModel):
    quantity: int = Field(..., ge=1, description="New quantity (>= 1)")


class ProductInCartOut(BaseModel):
    """Product offering as clients know it: exposed as `product`."""

    id: int
    name: str


class CartItemOut(BaseModel):
    id: UUID
    product: ProductInCartOut
    quantity: int
    price: Decimal
    subtotal: Decimal


class CartOut(BaseModel):
    id: UUID
    session_id: UUID | None = None
    items: List[CartItemOut]
    total_items: int
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartCountOut(BaseModel):
    total_items: int
