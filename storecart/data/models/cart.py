#storecart/data/models/cart.py
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Enum, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from storecart.data.database import Base
from storecart.domain.actor import CartOwner, owner_from_columns


def utcnow():
    return datetime.now(timezone.utc)


class CartStatus(str, enum.Enum):
    ACTIVE = "active"
    ABANDONED = "abandoned"
    CONVERTED = "converted"
    EXPIRED = "expired"


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id = Column(Integer, nullable=False, index=True)

    # owner is a tagged union: ("user", "<store user id>") or ("session", "<uuid>")
    owner_kind = Column(String(16), nullable=False)
    owner_key = Column(String(64), nullable=False)

    status = Column(
        Enum(CartStatus, name="cart_status", values_callable=lambda e: [s.value for s in e]),
        nullable=False,
        default=CartStatus.ACTIVE,
    )
    expires_at = Column(DateTime(timezone=True), nullable=True)
    last_activity_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.created_at",
    )

    __table_args__ = (
        CheckConstraint("owner_kind IN ('user', 'session')", name="ck_cart_owner_kind"),
        # one active cart per (store, owner)
        Index(
            "uq_carts_active_owner",
            "store_id",
            "owner_kind",
            "owner_key",
            unique=True,
            postgresql_where=(status == CartStatus.ACTIVE) & deleted_at.is_(None),
            sqlite_where=(status == CartStatus.ACTIVE) & deleted_at.is_(None),
        ),
    )

    @property
    def owner(self) -> CartOwner:
        return owner_from_columns(self.owner_kind, self.owner_key)

    @owner.setter
    def owner(self, value: CartOwner):
        self.owner_kind = value.kind
        self.owner_key = value.key
