# app/worker.py
from celery import Celery
from app.core.config import settings

celery = Celery(
    "clasificados",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["app.tasks.notifications"]
)

# Configuración
celery.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=60,
    worker_max_tasks_per_child=1000,
    # Las notificaciones son best-effort: sin reintentos ni resultados
    task_ignore_result=True,
    task_acks_late=False,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_eager_propagates=False,
)
