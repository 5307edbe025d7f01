# storecart/celery_worker.py
from celery import Celery

from storecart.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storecart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks have to be imported explicitly so the worker registers them
celery_app.conf.imports = ("storecart.tasks.expire",)

celery_app.conf.beat_schedule = {
    "expire-carts-every-hour": {
        "task": "storecart.tasks.expire.expire_carts_task",
        "schedule": 60.0 * 60,
    },
    "mark-abandoned-carts-daily": {
        "task": "storecart.tasks.expire.mark_abandoned_carts_task",
        "schedule": 24 * 60.0 * 60,
    },
}

celery_app.conf.timezone = "UTC"
