# storecart/services/cart_service.py
from datetime import datetime, timezone, timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storecart.data.models.cart import CartModel, CartStatus
from storecart.data.models.cart_item import CartItemModel
from storecart.domain import totals
from storecart.domain.actor import AuthenticatedOwner, AnonymousOwner, CartOwner
from storecart.domain.errors import NotFoundError, InvalidArgumentError
from storecart.repos.cart_repo import CartRepo
from storecart.services.product_client import ProductClient, ProductOffering
from storecart.services.store_client import StoreClient
from storecart.services.lock_service import LockService
from storecart.utils.settings import ANONYMOUS_CART_TTL_SECONDS, ABANDONED_AFTER_DAYS
from storecart.utils.logging import get_logger

logger = get_logger(__name__)


def _now():
    return datetime.now(timezone.utc)


class CartService:
    """
    Use cases of the cart domain.
    queries (get, count) only read, they never create a cart
    commands (add, update, remove, clear, merge) run in one transaction
    under the per-owner lock
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient,
        store_client: StoreClient,
        lock_service: LockService,
    ):
        self.repo = CartRepo(db)
        self.product_client = product_client
        self.store_client = store_client
        self.lock_service = lock_service

    # =====================================================
    # QUERIES
    # =====================================================
    def get_active_cart(self, owner: CartOwner | None, store_id: int) -> CartModel | None:
        """Active cart of the owner in the store, None for a never-touched owner."""
        self._ensure_store(store_id)
        if owner is None:
            return None
        return self.repo.find_active_cart(store_id, owner)

    def get_item_count(self, owner: CartOwner | None, store_id: int) -> int:
        cart = self.get_active_cart(owner, store_id)
        if not cart:
            return 0
        return totals.total_items(cart.items)

    # =====================================================
    # CART LOCATOR
    # =====================================================
    def get_or_create_cart(self, owner: CartOwner, store_id: int, for_update: bool = False) -> CartModel:
        """
        Returns the single active cart of owner in store, creating it if absent.

        Two first-time requests can both miss the lookup. The loser of the
        insert hits the unique index on active carts and reads the winner's cart.
        """
        cart = self.repo.find_active_cart(store_id, owner, for_update=for_update)

        if cart is None:
            try:
                cart = self.repo.insert_cart(self._new_cart(owner, store_id))
                logger.info(f"Created cart {cart.id} for {owner.kind} {owner.key} in store {store_id}")
            except IntegrityError:
                logger.warning(
                    f"Concurrent cart create for {owner.kind} {owner.key} in store {store_id}, "
                    f"reading existing cart"
                )
                cart = self.repo.find_active_cart(store_id, owner, for_update=for_update)
                if cart is None:
                    raise

        self.repo.touch_cart(cart)
        return cart

    def _new_cart(self, owner: CartOwner, store_id: int) -> CartModel:
        now = _now()
        expires_at = None
        if isinstance(owner, AnonymousOwner):
            expires_at = now + timedelta(seconds=ANONYMOUS_CART_TTL_SECONDS)

        cart = CartModel(
            store_id=store_id,
            status=CartStatus.ACTIVE,
            expires_at=expires_at,
            last_activity_at=now,
        )
        cart.owner = owner
        return cart

    # =====================================================
    # COMMANDS
    # =====================================================
    def add_to_cart(
        self,
        owner: CartOwner | None,
        store_id: int,
        product_store_id: int,
        quantity: int,
    ) -> CartModel:
        """
        Merge (offering, quantity) into the owner's active cart.

        Existing line: quantity grows, unit price stays the one captured on
        the first add. New line: live price becomes the snapshot.
        """
        if owner is None:
            raise InvalidArgumentError("Either an authenticated user or a session id is required")
        if quantity is None or quantity < 1:
            raise InvalidArgumentError("Quantity must be at least 1")

        self._ensure_store(store_id)
        offering = self._fetch_sellable_offering(store_id, product_store_id)

        with self.lock_service.cart_lock(store_id, owner):
            try:
                cart = self.get_or_create_cart(owner, store_id, for_update=True)
                self.repo.lock_cart(cart.id)
                self._merge_line(cart, offering, quantity)
                self.repo.commit()
            except Exception as e:
                logger.error(f"Add to cart failed for store {store_id}, offering {product_store_id}: {e}")
                self.repo.rollback()
                raise

        return self._reload(cart.id)

    def _merge_line(self, cart: CartModel, offering: ProductOffering, quantity: int) -> CartItemModel:
        item = self.repo.get_active_item(cart.id, offering.id)

        if item:
            logger.info(
                f"Offering {offering.id} already in cart {cart.id}, quantity "
                f"{item.quantity} -> {item.quantity + quantity}"
            )
            item.quantity += quantity
            self.repo.add_cart_item(item)
        else:
            logger.info(f"Adding offering {offering.id} to cart {cart.id} at {offering.price}")
            item = CartItemModel(
                product_store_id=offering.id,
                product_name=offering.name,
                quantity=quantity,
                price=offering.price,
            )
            cart.items.append(item)
            self.repo.add_cart_item(item)

        self.repo.touch_cart(cart)
        return item

    def update_item_quantity(
        self,
        owner: CartOwner | None,
        store_id: int,
        item_id: UUID,
        quantity: int,
    ) -> CartModel:
        if quantity is None or quantity < 1:
            raise InvalidArgumentError("Quantity must be at least 1")
        self._ensure_store(store_id)
        if owner is None:
            raise NotFoundError("Cart not found")

        with self.lock_service.cart_lock(store_id, owner):
            try:
                cart, item = self._owned_item(owner, store_id, item_id)
                logger.info(f"Setting quantity of item {item.id} in cart {cart.id} to {quantity}")
                item.quantity = quantity
                self.repo.add_cart_item(item)
                self.repo.touch_cart(cart)
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        return self._reload(cart.id)

    def remove_item(self, owner: CartOwner | None, store_id: int, item_id: UUID) -> CartModel:
        self._ensure_store(store_id)
        if owner is None:
            raise NotFoundError("Cart not found")

        with self.lock_service.cart_lock(store_id, owner):
            try:
                cart, item = self._owned_item(owner, store_id, item_id)
                logger.info(f"Removing item {item.id} from cart {cart.id}")
                self.repo.soft_delete_items([item])
                self.repo.touch_cart(cart)
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        return self._reload(cart.id)

    def clear_cart(self, owner: CartOwner | None, store_id: int) -> CartModel | None:
        self._ensure_store(store_id)
        if owner is None:
            return None

        with self.lock_service.cart_lock(store_id, owner):
            try:
                cart = self.repo.find_active_cart(store_id, owner, for_update=True)
                if not cart:
                    self.repo.rollback()
                    return None

                items = self.repo.get_active_items(cart.id)
                if items:
                    self.repo.soft_delete_items(items)
                    self.repo.touch_cart(cart)
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        logger.info(f"Cleared {len(items)} items from cart {cart.id}")
        return self._reload(cart.id)

    def merge_guest_cart(self, user_id: int, session_token: UUID, store_id: int) -> CartModel:
        """
        Runs when a guest logs in: the session cart is folded into the
        user's cart.

        - only guest cart: it is handed over to the user
        - both: shared offerings sum quantities (user's snapshot price wins),
          the rest of the lines move over, guest cart becomes converted
        - no guest cart: the user's cart, created if needed
        """
        self._ensure_store(store_id)
        user = AuthenticatedOwner(int(user_id))
        guest = AnonymousOwner(session_token)

        with self.lock_service.cart_lock(store_id, user):
            try:
                guest_cart = self.repo.find_active_cart(store_id, guest, for_update=True)
                user_cart = self.repo.find_active_cart(store_id, user, for_update=True)

                if guest_cart is None:
                    cart = user_cart or self.get_or_create_cart(user, store_id)
                elif user_cart is None:
                    logger.info(f"Handing guest cart {guest_cart.id} over to user {user.user_id}")
                    guest_cart.owner = user
                    guest_cart.expires_at = None
                    self.repo.touch_cart(guest_cart)
                    cart = guest_cart
                else:
                    logger.info(f"Merging guest cart {guest_cart.id} into user cart {user_cart.id}")
                    self._fold_lines(guest_cart, user_cart)
                    guest_cart.status = CartStatus.CONVERTED
                    self.repo.touch_cart(guest_cart)
                    self.repo.touch_cart(user_cart)
                    cart = user_cart

                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        return self._reload(cart.id)

    def _fold_lines(self, source: CartModel, target: CartModel) -> None:
        self.repo.lock_cart(target.id)
        target_lines = {i.product_store_id: i for i in totals.active_items(target.items)}

        for line in totals.active_items(source.items):
            existing = target_lines.get(line.product_store_id)
            if existing:
                existing.quantity += line.quantity
                self.repo.soft_delete_items([line])
            else:
                line.cart = target
                target_lines[line.product_store_id] = line

    # =====================================================
    # MAINTENANCE
    # =====================================================
    def expire_carts(self, now: datetime | None = None) -> int:
        now = now or _now()
        count = self.repo.expire_carts(now)
        self.repo.commit()
        logger.info(f"Expired {count} carts")
        return count

    def mark_abandoned_carts(self, days_inactive: int = ABANDONED_AFTER_DAYS, now: datetime | None = None) -> int:
        now = now or _now()
        cutoff = now - timedelta(days=days_inactive)
        count = self.repo.mark_abandoned(cutoff, now)
        self.repo.commit()
        logger.info(f"Marked {count} carts abandoned after {days_inactive} days of inactivity")
        return count

    # =====================================================
    # HELPERS
    # =====================================================
    def _ensure_store(self, store_id: int) -> None:
        if not self.store_client.store_exists(store_id):
            raise NotFoundError(f"Store {store_id} not found")

    def _fetch_sellable_offering(self, store_id: int, product_store_id: int) -> ProductOffering:
        logger.info(f"Fetching offering {product_store_id} of store {store_id}")
        offering = self.product_client.fetch_offering(store_id, product_store_id)

        if offering is None or offering.store_id != store_id:
            raise NotFoundError(f"Product {product_store_id} not found in store {store_id}")
        if not offering.is_active:
            raise NotFoundError(f"Product {product_store_id} is not available in store {store_id}")

        return offering

    def _owned_item(self, owner: CartOwner, store_id: int, item_id: UUID):
        #called under the cart lock, reads and locks the current rows
        cart = self.repo.find_active_cart(store_id, owner, for_update=True)
        if not cart:
            raise NotFoundError("Cart not found")

        item = self.repo.get_item(item_id)
        if not item:
            raise NotFoundError(f"Cart item {item_id} not found")
        if item.cart_id != cart.id:
            raise PermissionError("This item does not belong to your cart")

        return cart, item

    def _reload(self, cart_id: UUID) -> CartModel:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            raise NotFoundError(f"Cart {cart_id} not found")
        return cart
