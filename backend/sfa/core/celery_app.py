from celery import Celery

from sfa.core.config import settings

celery_app = Celery(
    "sfa_worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["sfa.worker.tasks"],
)

celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]
celery_app.conf.task_default_queue = "default"
celery_app.conf.task_acks_late = True
celery_app.conf.worker_max_tasks_per_child = 100
celery_app.conf.result_expires = 24 * 3600  # upload results polled via /uploads/tasks
celery_app.conf.task_routes = {
    "sfa.worker.tasks.*": {"queue": "bulk_uploads"},
}
