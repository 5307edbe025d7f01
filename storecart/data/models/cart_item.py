import uuid

from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, DateTime, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from storecart.data.database import Base
from storecart.data.models.cart import utcnow


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    cart_id = Column(Uuid, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)

    # product offering = product configured in one store
    product_store_id = Column(Integer, nullable=False)
    product_name = Column(String(255), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)
    # snapshot of the offering price when the line was created
    price = Column(Numeric(14, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    cart = relationship("CartModel", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity"),
        Index(
            "uq_cart_items_cart_offering",
            "cart_id",
            "product_store_id",
            unique=True,
            postgresql_where=deleted_at.is_(None),
            sqlite_where=deleted_at.is_(None),
        ),
    )
