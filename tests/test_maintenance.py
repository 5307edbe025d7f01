import uuid
from datetime import datetime, timedelta, timezone

from storecart.data.models import CartModel, CartStatus
from storecart.domain.actor import AnonymousOwner, AuthenticatedOwner
from storecart.services.cart_service import CartService

from tests.conftest import STORE_ID


def make_cart(db, owner, **fields):
    cart = CartModel(store_id=STORE_ID, status=CartStatus.ACTIVE, **fields)
    cart.owner = owner
    db.add(cart)
    db.commit()
    return cart


class TestExpireCarts:
    def test_only_past_expiry_active_carts_expire(self, db, service):
        now = datetime.now(timezone.utc)
        stale = make_cart(db, AnonymousOwner(uuid.uuid4()), expires_at=now - timedelta(minutes=1))
        fresh = make_cart(db, AnonymousOwner(uuid.uuid4()), expires_at=now + timedelta(days=1))
        forever = make_cart(db, AuthenticatedOwner(5), expires_at=None)

        assert service.expire_carts(now) == 1

        db.expire_all()
        assert db.get(CartModel, stale.id).status == CartStatus.EXPIRED
        assert db.get(CartModel, fresh.id).status == CartStatus.ACTIVE
        assert db.get(CartModel, forever.id).status == CartStatus.ACTIVE

    def test_expired_owner_gets_a_new_cart(self, db, service):
        now = datetime.now(timezone.utc)
        owner = AnonymousOwner(uuid.uuid4())
        old = make_cart(db, owner, expires_at=now - timedelta(minutes=1))
        service.expire_carts(now)
        db.expire_all()

        cart = service.add_to_cart(owner, STORE_ID, 42, 1)
        assert cart.id != old.id

    def test_runs_without_collaborators(self, db):
        svc = CartService(db, product_client=None, store_client=None, lock_service=None)
        assert svc.expire_carts() == 0


class TestMarkAbandoned:
    def test_idle_carts_are_abandoned(self, db, service):
        now = datetime.now(timezone.utc)
        idle = make_cart(db, AuthenticatedOwner(1), last_activity_at=now - timedelta(days=8))
        busy = make_cart(db, AuthenticatedOwner(2), last_activity_at=now - timedelta(days=1))

        assert service.mark_abandoned_carts(days_inactive=7, now=now) == 1

        db.expire_all()
        assert db.get(CartModel, idle.id).status == CartStatus.ABANDONED
        assert db.get(CartModel, busy.id).status == CartStatus.ACTIVE
