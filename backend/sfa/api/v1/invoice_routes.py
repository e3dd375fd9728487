from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.auth import UserSession
from sfa.schemas.invoice import InvoiceCreate, InvoiceFromOrder, InvoiceOut, PaymentStatusUpdate
from sfa.services.invoice_service import (
    create_invoice,
    create_invoice_from_order,
    get_invoice,
    list_invoices,
    update_payment_status,
)

router = APIRouter()


@router.post(
    "",
    response_model=InvoiceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create an invoice from explicit lines",
)
def create_invoice_api(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return create_invoice(db, session, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.post(
    "/from-order/{order_id}",
    response_model=InvoiceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Invoice an existing sale order",
)
def invoice_order_api(
    order_id: int,
    payload: Optional[InvoiceFromOrder] = None,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return create_invoice_from_order(db, session, order_id, payload or InvoiceFromOrder())
    except ValueError as exc:
        raise http_error(exc)


@router.get("", response_model=List[InvoiceOut], summary="List invoices")
def list_invoices_api(
    customer_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    payment_status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    if session.is_customer:
        customer_id = session.customer_id
    return list_invoices(
        db,
        customer_id=customer_id,
        branch_id=branch_id,
        payment_status=payment_status,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )


@router.get("/{invoice_id}", response_model=InvoiceOut, summary="Get an invoice")
def get_invoice_api(
    invoice_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return get_invoice(db, invoice_id)
    except ValueError as exc:
        raise http_error(exc)


@router.patch("/{invoice_id}/payment-status", response_model=InvoiceOut, summary="Update payment status")
def payment_status_api(
    invoice_id: int,
    payload: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return update_payment_status(db, invoice_id, payload.payment_status)
    except ValueError as exc:
        raise http_error(exc)
