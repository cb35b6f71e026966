"""
Celery app for the dashboard's background jobs (reservation exports).

Redis is both broker and result store. In development the tasks run eagerly
inside the web process so no worker or broker is required.

Run a worker with:
    celery -A dashboard.celery_worker worker --loglevel=info
"""

from celery import Celery

from dashboard.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "dashboard",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["dashboard.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_always_eager=settings.is_development,
    task_eager_propagates=True,
    # exports touch one workbook per restaurant; one task at a time per worker slot
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    result_expires=3600,
    broker_connection_retry_on_startup=True,
)
