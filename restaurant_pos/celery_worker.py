# restaurant_pos/celery_worker.py
from celery import Celery

from restaurant_pos.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
)

celery_app = Celery(
    "pos",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# explicit imports so the worker registers the tasks
celery_app.conf.imports = (
    "restaurant_pos.tasks.stock",
    "restaurant_pos.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "low-stock-sweep-every-hour": {
        "task": "restaurant_pos.tasks.stock.low_stock_sweep_task",
        "schedule": 3600.0,
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
