import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.core.storage import StorageClient, StorageError
from sfa.models.collection import Collection, CollectionLine
from sfa.schemas.auth import UserSession
from sfa.schemas.collection import CollectionCreate
from sfa.services.branch_service import get_branch
from sfa.services.customer_service import get_customer
from sfa.services.pricing_service import collection_balance
from sfa.services.route_service import active_route_id
from sfa.utils.doc_numbers import collection_number

logger = logging.getLogger(__name__)

RECEIPT_FOLDER = "collection-receipts"
COLLECTION_STATUSES = ("pending", "verified", "rejected")


def _validate(session: UserSession, payload: CollectionCreate) -> int:
    customer_id = payload.customer_id
    if session.is_customer:
        customer_id = customer_id or session.customer_id
        if customer_id != session.customer_id:
            raise ValidationError("Customers can only record their own collections")
    if customer_id is None:
        raise ValidationError("Please select a customer")
    if payload.amount is None or payload.amount <= 0:
        raise ValidationError("Please enter a valid amount")
    if payload.payment_mode == "cheque":
        missing = [
            name
            for name, value in (
                ("cheque_no", payload.cheque_no),
                ("cheque_date", payload.cheque_date),
                ("bank_name", payload.bank_name),
            )
            if not value
        ]
        if missing:
            raise ValidationError(f"Cheque payments require {', '.join(missing)}")
    if not any(line.invoice_no.strip() for line in payload.lines):
        raise ValidationError("Please enter at least one collection detail")
    return customer_id


def _store_receipt(content: Optional[bytes], filename: Optional[str], content_type: Optional[str]) -> Optional[str]:
    """Upload the receipt image; failures are logged and the collection is saved without it."""
    if not content or not filename:
        return None
    try:
        path = StorageClient.generate_path(RECEIPT_FOLDER, filename)
        return StorageClient.upload(content, path, content_type)
    except StorageError as exc:
        logger.error("Error uploading receipt %s: %s", filename, exc, exc_info=True)
        return None


def create_collection(
    db: Session,
    session: UserSession,
    payload: CollectionCreate,
    receipt: Optional[bytes] = None,
    receipt_filename: Optional[str] = None,
    receipt_content_type: Optional[str] = None,
) -> Collection:
    customer_id = _validate(session, payload)
    customer = get_customer(db, customer_id)
    if payload.branch_id is not None:
        get_branch(db, payload.branch_id)

    image_url = _store_receipt(receipt, receipt_filename, receipt_content_type)

    collection = Collection(
        collection_no=collection_number(),
        collection_date=payload.collection_date,
        customer_id=customer.customer_id,
        branch_id=payload.branch_id,
        route_id=active_route_id(db, customer.customer_id),
        field_staff_id=session.user_id,
        amount=payload.amount,
        payment_mode=payload.payment_mode,
        payment_reference=payload.payment_reference or None,
        cheque_no=payload.cheque_no or None,
        cheque_date=payload.cheque_date,
        bank_name=payload.bank_name or None,
        notes=payload.notes or None,
        image_url=image_url,
        image_uploaded_at=datetime.now(timezone.utc) if image_url else None,
        collection_status="pending",
        collected_by=session.user_id,
    )
    collection.lines = [
        CollectionLine(
            invoice_no=line.invoice_no.strip(),
            invoice_date=line.invoice_date,
            invoice_amount=line.invoice_amount,
            received_amount=line.received_amount,
            balance_amount=collection_balance(line.invoice_amount, line.received_amount),
        )
        for line in payload.lines
        if line.invoice_no.strip()
    ]
    db.add(collection)
    db.commit()
    db.refresh(collection)
    logger.info("Collection %s saved for customer %s", collection.collection_no, customer.customer_id)
    return collection


def get_collection(db: Session, collection_id: int) -> Collection:
    collection = (
        db.query(Collection)
        .options(selectinload(Collection.lines))
        .filter(Collection.collection_id == collection_id)
        .first()
    )
    if not collection:
        raise NotFoundError("Collection", collection_id)
    return collection


def list_collections(
    db: Session,
    customer_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[Collection]:
    query = db.query(Collection).options(selectinload(Collection.lines))
    if customer_id is not None:
        query = query.filter(Collection.customer_id == customer_id)
    if branch_id is not None:
        query = query.filter(Collection.branch_id == branch_id)
    if status:
        query = query.filter(Collection.collection_status == status)
    if date_from:
        query = query.filter(Collection.collection_date >= date_from)
    if date_to:
        query = query.filter(Collection.collection_date <= date_to)
    return (
        query.order_by(Collection.collection_date.desc(), Collection.collection_id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def update_collection_status(db: Session, collection_id: int, status: str) -> Collection:
    if status not in COLLECTION_STATUSES:
        raise ValidationError(f"Unknown collection status: {status}")
    collection = get_collection(db, collection_id)
    collection.collection_status = status
    db.commit()
    db.refresh(collection)
    return collection
