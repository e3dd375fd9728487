import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.models.sales import SaleOrderDetail, SaleOrderHeader
from sfa.schemas.auth import UserSession
from sfa.schemas.order import DocumentLineIn, OrderCreate
from sfa.services.branch_service import get_branch
from sfa.services.customer_service import get_customer
from sfa.services.document_lines import apply_totals, price_document_lines
from sfa.services.pricing_service import aggregate_lines
from sfa.services.route_service import active_route_id
from sfa.utils.doc_numbers import order_number

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("draft", "confirmed", "cancelled", "invoiced")


def _resolve_customer_id(session: UserSession, requested: Optional[int]) -> int:
    if session.is_customer:
        if requested is None:
            requested = session.customer_id
        elif requested != session.customer_id:
            raise ValidationError("Customers can only place orders for themselves")
    if requested is None:
        raise ValidationError("Please select a customer")
    return requested


def _build_details(db: Session, lines: List[DocumentLineIn], customer_type: str, on_date: date):
    priced = price_document_lines(db, lines, customer_type, on_date)
    details = [SaleOrderDetail(**p.detail_fields(), notes=p.notes) for p in priced]
    return details, aggregate_lines(p.breakdown for p in priced)


def create_order(db: Session, session: UserSession, payload: OrderCreate) -> SaleOrderHeader:
    customer_id = _resolve_customer_id(session, payload.customer_id)
    if not payload.lines:
        raise ValidationError("Please add at least one product")

    customer = get_customer(db, customer_id)
    if payload.branch_id is not None:
        get_branch(db, payload.branch_id)

    details, totals = _build_details(db, payload.lines, customer.customer_type, payload.order_date)

    order = SaleOrderHeader(
        order_no=order_number(),
        order_date=payload.order_date,
        customer_id=customer.customer_id,
        branch_id=payload.branch_id,
        route_id=active_route_id(db, customer.customer_id),
        field_staff_id=session.user_id,
        order_type=payload.order_type,
        payment_type=payload.payment_type,
        mode_of_transport=payload.mode_of_transport,
        order_status="confirmed",
        remarks=payload.remarks,
        created_by=session.user_id,
    )
    apply_totals(order, totals)
    order.lines = details
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Order %s saved with %s lines, net %s", order.order_no, len(details), totals.net_amount)
    return order


def get_order(db: Session, order_id: int) -> SaleOrderHeader:
    order = (
        db.query(SaleOrderHeader)
        .options(selectinload(SaleOrderHeader.lines))
        .filter(SaleOrderHeader.order_id == order_id)
        .first()
    )
    if not order:
        raise NotFoundError("Order", order_id)
    return order


def list_orders(
    db: Session,
    customer_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    route_id: Optional[int] = None,
    field_staff_id: Optional[int] = None,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[SaleOrderHeader]:
    query = db.query(SaleOrderHeader).options(selectinload(SaleOrderHeader.lines))
    if customer_id is not None:
        query = query.filter(SaleOrderHeader.customer_id == customer_id)
    if branch_id is not None:
        query = query.filter(SaleOrderHeader.branch_id == branch_id)
    if route_id is not None:
        query = query.filter(SaleOrderHeader.route_id == route_id)
    if field_staff_id is not None:
        query = query.filter(SaleOrderHeader.field_staff_id == field_staff_id)
    if status:
        query = query.filter(SaleOrderHeader.order_status == status)
    if date_from:
        query = query.filter(SaleOrderHeader.order_date >= date_from)
    if date_to:
        query = query.filter(SaleOrderHeader.order_date <= date_to)
    return (
        query.order_by(SaleOrderHeader.order_date.desc(), SaleOrderHeader.order_id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def replace_order_lines(db: Session, order_id: int, lines: List[DocumentLineIn]) -> SaleOrderHeader:
    """Swap the order's lines and recompute every total from scratch."""
    order = get_order(db, order_id)
    if order.order_status in ("cancelled", "invoiced"):
        raise ValidationError(f"Order {order.order_no} is {order.order_status} and cannot be edited")
    if not lines:
        raise ValidationError("Please add at least one product")

    details, totals = _build_details(db, lines, order.customer.customer_type, order.order_date)
    order.lines.clear()
    db.flush()
    order.lines.extend(details)
    apply_totals(order, totals)
    db.commit()
    db.refresh(order)
    return order


def update_order_status(db: Session, order_id: int, status: str) -> SaleOrderHeader:
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Unknown order status: {status}")
    order = get_order(db, order_id)
    order.order_status = status
    db.commit()
    db.refresh(order)
    return order
