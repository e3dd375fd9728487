import logging

from celery import shared_task

from sfa.core.celery_app import celery_app  # noqa: F401  registers the app for shared tasks
from sfa.core.database import SessionLocal
from sfa.schemas.auth import UserSession
from sfa.services.bulk_upload_service import run_bulk_upload

logger = logging.getLogger(__name__)


@shared_task(name="sfa.worker.tasks.run_bulk_upload")
def run_bulk_upload_job(upload_type: str, text: str, file_name: str, session: dict) -> dict:
    """Run a bulk upload on the worker and return the BulkUploadResult as a dict."""
    db = SessionLocal()
    try:
        result = run_bulk_upload(db, upload_type, text, file_name, UserSession(**session))
    finally:
        db.close()
    logger.info("Bulk upload task finished", extra={"reference_no": result.reference_no})
    return result.model_dump()
