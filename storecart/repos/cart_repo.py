# storecart/repos/cart_repo.py
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from storecart.data.models.cart import CartModel, CartStatus, utcnow
from storecart.data.models.cart_item import CartItemModel
from storecart.domain.actor import CartOwner


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    # ---- carts ----
    def find_active_cart(self, store_id: int, owner: CartOwner, for_update: bool = False) -> CartModel | None:
        stmt = (
            select(CartModel)
            .where(
                CartModel.store_id == store_id,
                CartModel.owner_kind == owner.kind,
                CartModel.owner_key == owner.key,
                CartModel.status == CartStatus.ACTIVE,
                CartModel.deleted_at.is_(None),
            )
            .options(selectinload(CartModel.items))
        )
        if for_update:
            #locked read has to see rows committed while we waited for the lock
            stmt = stmt.with_for_update(of=CartModel).execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_cart(self, cart_id: UUID) -> CartModel | None:
        stmt = (
            select(CartModel)
            .where(CartModel.id == cart_id, CartModel.deleted_at.is_(None))
            .options(selectinload(CartModel.items))
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def lock_cart(self, cart_id: UUID) -> None:
        #row lock held until commit/rollback, serializes merges into one cart
        self.db.execute(
            select(CartModel.id).where(CartModel.id == cart_id).with_for_update()
        )

    def insert_cart(self, cart: CartModel) -> CartModel:
        """Insert inside a SAVEPOINT, IntegrityError rolls back only the savepoint."""
        with self.db.begin_nested():
            self.db.add(cart)
        return cart

    def touch_cart(self, cart: CartModel, when: datetime | None = None) -> None:
        cart.last_activity_at = when or utcnow()
        self.db.add(cart)

    def expire_carts(self, now: datetime) -> int:
        result = self.db.execute(
            update(CartModel)
            .where(
                CartModel.status == CartStatus.ACTIVE,
                CartModel.expires_at.is_not(None),
                CartModel.expires_at < now,
            )
            .values(status=CartStatus.EXPIRED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def mark_abandoned(self, cutoff: datetime, now: datetime) -> int:
        result = self.db.execute(
            update(CartModel)
            .where(
                CartModel.status == CartStatus.ACTIVE,
                CartModel.last_activity_at < cutoff,
            )
            .values(status=CartStatus.ABANDONED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # ---- items ----
    def get_active_item(self, cart_id: UUID, product_store_id: int) -> CartItemModel | None:
        stmt = (
            select(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_store_id == product_store_id,
                CartItemModel.deleted_at.is_(None),
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_active_items(self, cart_id: UUID) -> list[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.deleted_at.is_(None),
            )
            .order_by(CartItemModel.created_at)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_item(self, item_id: UUID) -> CartItemModel | None:
        stmt = (
            select(CartItemModel)
            .where(
                CartItemModel.id == item_id,
                CartItemModel.deleted_at.is_(None),
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def soft_delete_items(self, items, when: datetime | None = None) -> None:
        when = when or utcnow()
        for item in items:
            item.deleted_at = when
            self.db.add(item)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
