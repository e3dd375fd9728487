import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.core.storage import StorageError
from sfa.deps import get_current_session, get_db
from sfa.schemas.auth import UserSession
from sfa.schemas.customer import CustomerCreate, CustomerOut, CustomerUpdate
from sfa.services.customer_service import (
    attach_customer_image,
    create_customer,
    delete_customer,
    get_customer,
    list_customers,
    update_customer,
)

router = APIRouter()
logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")


@router.post(
    "",
    response_model=CustomerOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer (and its login user when a mobile number is given)",
)
def create_customer_api(
    payload: CustomerCreate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return create_customer(db, payload, session=session)
    except ValueError as exc:
        raise http_error(exc)


@router.get("", response_model=List[CustomerOut], summary="List customers")
def list_customers_api(
    search: Optional[str] = None,
    status_filter: str = Query(default="all", alias="status", pattern="^(all|active|inactive)$"),
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    return list_customers(db, search=search, status=status_filter, session=session, limit=limit, offset=offset)


@router.get("/{customer_id}", response_model=CustomerOut, summary="Get a customer")
def get_customer_api(
    customer_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    if session.is_customer and session.customer_id != customer_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")
    try:
        return get_customer(db, customer_id)
    except ValueError as exc:
        raise http_error(exc)


@router.put("/{customer_id}", response_model=CustomerOut, summary="Update a customer")
def update_customer_api(
    customer_id: int,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return update_customer(db, customer_id, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a customer",
)
def delete_customer_api(
    customer_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        delete_customer(db, customer_id)
    except ValueError as exc:
        raise http_error(exc)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Customer has documents and cannot be deleted; deactivate it instead.",
        )
    return None


@router.post(
    "/{customer_id}/images/{slot}",
    response_model=CustomerOut,
    summary="Upload a customer image into slot 1, 2 or 3",
)
async def upload_customer_image(
    customer_id: int,
    slot: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    filename = file.filename or ""
    if not filename.lower().endswith(IMAGE_EXTENSIONS):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed.")
    content = await file.read()
    try:
        return attach_customer_image(db, customer_id, slot, content, filename, file.content_type)
    except StorageError as exc:
        logger.error("Error uploading image for customer %s: %s", customer_id, exc, exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to store image.")
    except ValueError as exc:
        raise http_error(exc)
