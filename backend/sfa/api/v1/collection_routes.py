import json
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError as PayloadError
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.auth import UserSession
from sfa.schemas.collection import CollectionCreate, CollectionOut, CollectionStatusUpdate
from sfa.services.collection_service import (
    create_collection,
    get_collection,
    list_collections,
    update_collection_status,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=CollectionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record a collection with an optional receipt image",
)
async def create_collection_api(
    payload: str = Form(..., description="Collection JSON"),
    receipt: Optional[UploadFile] = File(default=None),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        data = CollectionCreate.model_validate_json(payload)
    except PayloadError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=json.loads(exc.json()))

    content = await receipt.read() if receipt else None
    try:
        return create_collection(
            db,
            session,
            data,
            receipt=content,
            receipt_filename=receipt.filename if receipt else None,
            receipt_content_type=receipt.content_type if receipt else None,
        )
    except ValueError as exc:
        raise http_error(exc)


@router.get("", response_model=List[CollectionOut], summary="List collections")
def list_collections_api(
    customer_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    collection_status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    if session.is_customer:
        customer_id = session.customer_id
    return list_collections(
        db,
        customer_id=customer_id,
        branch_id=branch_id,
        status=collection_status,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )


@router.get("/{collection_id}", response_model=CollectionOut, summary="Get a collection")
def get_collection_api(
    collection_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return get_collection(db, collection_id)
    except ValueError as exc:
        raise http_error(exc)


@router.patch("/{collection_id}/status", response_model=CollectionOut, summary="Verify or reject a collection")
def update_status_api(
    collection_id: int,
    payload: CollectionStatusUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return update_collection_status(db, collection_id, payload.collection_status)
    except ValueError as exc:
        raise http_error(exc)
