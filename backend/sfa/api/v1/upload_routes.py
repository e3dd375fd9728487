import logging
from typing import List, Optional, Union

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.core.celery_app import celery_app
from sfa.core.exceptions import BulkUploadError
from sfa.deps import get_current_session, get_db
from sfa.schemas.auth import UserSession
from sfa.schemas.upload import BulkUploadQueued, BulkUploadRefOut, BulkUploadResult
from sfa.services.bulk.strategies import get_strategy
from sfa.services.bulk_upload_service import (
    get_bulk_reference,
    list_bulk_references,
    retire_bulk_reference,
    run_bulk_upload,
)
from sfa.worker.tasks import run_bulk_upload_job

router = APIRouter()
logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".csv", ".txt")


def _read_text(content: bytes, filename: str) -> str:
    if not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        logger.error("Unable to decode upload %s: %s", filename, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file must be UTF-8 text.",
        )


@router.get(
    "/references",
    response_model=List[BulkUploadRefOut],
    summary="List bulk upload references",
)
def list_references_api(
    upload_type: Optional[str] = None,
    ref_status: Optional[str] = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    return list_bulk_references(db, upload_type=upload_type, status=ref_status, limit=limit, offset=offset)


@router.get(
    "/references/{reference_no}",
    response_model=BulkUploadRefOut,
    summary="Get a bulk upload reference with its error list",
)
def get_reference_api(
    reference_no: str,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return get_bulk_reference(db, reference_no)
    except ValueError as exc:
        raise http_error(exc)


@router.delete(
    "/references/{reference_no}",
    response_model=BulkUploadRefOut,
    summary="Retire a bulk upload and deactivate the products it created",
)
def retire_reference_api(
    reference_no: str,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return retire_bulk_reference(db, reference_no)
    except ValueError as exc:
        raise http_error(exc)


@router.get("/tasks/{task_id}", summary="State of a queued bulk upload")
def task_status_api(task_id: str, session: UserSession = Depends(get_current_session)):
    result = AsyncResult(task_id, app=celery_app)
    payload = {"task_id": task_id, "state": result.state}
    if result.successful():
        payload["result"] = result.result
    elif result.failed():
        payload["error"] = str(result.result)
    return payload


@router.post(
    "/{upload_type}",
    response_model=Union[BulkUploadResult, BulkUploadQueued],
    summary="Upload a CSV of customers, products, daily_stock, outstanding, invoices, route_customers or route_users",
)
async def upload_file(
    upload_type: str,
    file: UploadFile = File(...),
    background: bool = Query(default=False, description="Queue the upload on the worker"),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    content = await file.read()
    text = _read_text(content, file.filename or "")
    try:
        strategy = get_strategy(upload_type)
    except ValueError as exc:
        raise http_error(exc)

    if background:
        task = run_bulk_upload_job.delay(strategy.upload_type, text, file.filename, session.model_dump())
        logger.info("Queued %s upload %s as task %s", strategy.upload_type, file.filename, task.id)
        return BulkUploadQueued(task_id=task.id, upload_type=strategy.upload_type)

    try:
        return run_bulk_upload(db, strategy.upload_type, text, file.filename, session)
    except (ValueError, BulkUploadError) as exc:
        raise http_error(exc)
