import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.models.sales import SalesInvoiceDetail, SalesInvoiceHeader
from sfa.schemas.auth import UserSession
from sfa.schemas.invoice import InvoiceCreate, InvoiceFromOrder
from sfa.schemas.order import DocumentLineIn
from sfa.services.branch_service import get_branch
from sfa.services.customer_service import get_customer
from sfa.services.document_lines import apply_totals, price_document_lines
from sfa.services.order_service import get_order
from sfa.services.pricing_service import aggregate_lines
from sfa.services.route_service import active_route_id
from sfa.utils.doc_numbers import invoice_number

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = ("pending", "paid", "overdue")


def create_invoice(db: Session, session: UserSession, payload: InvoiceCreate) -> SalesInvoiceHeader:
    if payload.customer_id is None:
        raise ValidationError("Please select a customer")
    if not payload.lines:
        raise ValidationError("Please add at least one product")

    customer = get_customer(db, payload.customer_id)
    if payload.branch_id is not None:
        get_branch(db, payload.branch_id)

    priced = price_document_lines(db, payload.lines, customer.customer_type, payload.invoice_date)
    invoice = SalesInvoiceHeader(
        invoice_no=(payload.invoice_no or "").strip() or invoice_number(),
        invoice_date=payload.invoice_date,
        customer_id=customer.customer_id,
        branch_id=payload.branch_id,
        route_id=active_route_id(db, customer.customer_id),
        field_staff_id=session.user_id,
        invoice_status="confirmed",
        payment_status="pending",
        created_by=session.user_id,
    )
    apply_totals(invoice, aggregate_lines(p.breakdown for p in priced))
    invoice.lines = [SalesInvoiceDetail(**p.detail_fields()) for p in priced]
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    logger.info("Invoice %s saved with %s lines", invoice.invoice_no, len(priced))
    return invoice


def create_invoice_from_order(
    db: Session,
    session: UserSession,
    order_id: int,
    payload: InvoiceFromOrder,
) -> SalesInvoiceHeader:
    """Invoice an order: copy its lines, recompute totals, mark it invoiced."""
    order = get_order(db, order_id)
    if order.order_status == "cancelled":
        raise ValidationError(f"Order {order.order_no} is cancelled")
    if order.order_status == "invoiced":
        raise ValidationError(f"Order {order.order_no} is already invoiced")
    if not order.lines:
        raise ValidationError(f"Order {order.order_no} has no lines")

    lines = [
        DocumentLineIn(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            discount_percentage=line.discount_percentage,
            tax_percentage=line.tax_percentage,
        )
        for line in order.lines
    ]
    priced = price_document_lines(db, lines, order.customer.customer_type, payload.invoice_date)

    invoice = SalesInvoiceHeader(
        invoice_no=(payload.invoice_no or "").strip() or invoice_number(),
        invoice_date=payload.invoice_date,
        order_id=order.order_id,
        order_no=order.order_no,
        customer_id=order.customer_id,
        branch_id=order.branch_id,
        route_id=order.route_id,
        field_staff_id=order.field_staff_id or session.user_id,
        invoice_status="confirmed",
        payment_status="pending",
        created_by=session.user_id,
    )
    apply_totals(invoice, aggregate_lines(p.breakdown for p in priced))
    invoice.lines = [SalesInvoiceDetail(**p.detail_fields()) for p in priced]
    order.order_status = "invoiced"
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


def get_invoice(db: Session, invoice_id: int) -> SalesInvoiceHeader:
    invoice = (
        db.query(SalesInvoiceHeader)
        .options(selectinload(SalesInvoiceHeader.lines))
        .filter(SalesInvoiceHeader.invoice_id == invoice_id)
        .first()
    )
    if not invoice:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def list_invoices(
    db: Session,
    customer_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    payment_status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[SalesInvoiceHeader]:
    query = db.query(SalesInvoiceHeader).options(selectinload(SalesInvoiceHeader.lines))
    if customer_id is not None:
        query = query.filter(SalesInvoiceHeader.customer_id == customer_id)
    if branch_id is not None:
        query = query.filter(SalesInvoiceHeader.branch_id == branch_id)
    if payment_status:
        query = query.filter(SalesInvoiceHeader.payment_status == payment_status)
    if date_from:
        query = query.filter(SalesInvoiceHeader.invoice_date >= date_from)
    if date_to:
        query = query.filter(SalesInvoiceHeader.invoice_date <= date_to)
    return (
        query.order_by(SalesInvoiceHeader.invoice_date.desc(), SalesInvoiceHeader.invoice_id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def update_payment_status(db: Session, invoice_id: int, payment_status: str) -> SalesInvoiceHeader:
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError(f"Unknown payment status: {payment_status}")
    invoice = get_invoice(db, invoice_id)
    invoice.payment_status = payment_status
    db.commit()
    db.refresh(invoice)
    return invoice
