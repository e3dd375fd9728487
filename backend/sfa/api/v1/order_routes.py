from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.auth import UserSession
from sfa.schemas.order import OrderCreate, OrderLinesReplace, OrderOut, OrderStatusUpdate
from sfa.services.order_service import (
    create_order,
    get_order,
    list_orders,
    replace_order_lines,
    update_order_status,
)

router = APIRouter()


def _check_owner(session: UserSession, customer_id: int) -> None:
    if session.is_customer and session.customer_id != customer_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")


@router.post(
    "",
    response_model=OrderOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sale order",
)
def create_order_api(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return create_order(db, session, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.get("", response_model=List[OrderOut], summary="List sale orders")
def list_orders_api(
    customer_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    route_id: Optional[int] = None,
    field_staff_id: Optional[int] = None,
    order_status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    if session.is_customer:
        customer_id = session.customer_id
    return list_orders(
        db,
        customer_id=customer_id,
        branch_id=branch_id,
        route_id=route_id,
        field_staff_id=field_staff_id,
        status=order_status,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )


@router.get("/{order_id}", response_model=OrderOut, summary="Get a sale order")
def get_order_api(
    order_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        order = get_order(db, order_id)
    except ValueError as exc:
        raise http_error(exc)
    _check_owner(session, order.customer_id)
    return order


@router.put("/{order_id}/lines", response_model=OrderOut, summary="Replace the lines of an order")
def replace_lines_api(
    order_id: int,
    payload: OrderLinesReplace,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        _check_owner(session, get_order(db, order_id).customer_id)
        return replace_order_lines(db, order_id, payload.lines)
    except ValueError as exc:
        raise http_error(exc)


@router.patch("/{order_id}/status", response_model=OrderOut, summary="Change order status")
def update_status_api(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        _check_owner(session, get_order(db, order_id).customer_id)
        return update_order_status(db, order_id, payload.order_status)
    except ValueError as exc:
        raise http_error(exc)
