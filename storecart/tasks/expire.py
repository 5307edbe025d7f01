# storecart/tasks/expire.py
from storecart.celery_worker import celery_app
from storecart.data.database import SessionLocal
from storecart.services.cart_service import CartService
from storecart.utils.settings import ABANDONED_AFTER_DAYS
from storecart.utils.logging import get_logger

logger = get_logger(__name__)


def _maintenance_service(db) -> CartService:
    #maintenance touches no collaborators and takes no per-owner locks
    return CartService(db, product_client=None, store_client=None, lock_service=None)


@celery_app.task(name="storecart.tasks.expire.expire_carts_task")
def expire_carts_task():
    logger.info("Expire carts task started")

    db = SessionLocal()
    try:
        return _maintenance_service(db).expire_carts()
    finally:
        db.close()


@celery_app.task(name="storecart.tasks.expire.mark_abandoned_carts_task")
def mark_abandoned_carts_task(days_inactive: int = ABANDONED_AFTER_DAYS):
    logger.info("Mark abandoned carts task started")

    db = SessionLocal()
    try:
        return _maintenance_service(db).mark_abandoned_carts(days_inactive)
    finally:
        db.close()
