from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.report import (
    BrandInsightRow,
    CustomerPurchaseRow,
    DailyStockRow,
    DashboardCounts,
    FieldStaffSalesRow,
    OrderStatusSummaryRow,
    OutstandingRow,
    RouteSalesRow,
)
from sfa.services import report_service

router = APIRouter(dependencies=[Depends(get_current_session)])


@router.get("/dashboard", response_model=DashboardCounts, summary="Customer, product, order and collection totals")
def dashboard(db: Session = Depends(get_db)):
    return report_service.dashboard_counts(db)


@router.get("/route-sales", response_model=List[RouteSalesRow], summary="Sales per route")
def route_sales(
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return report_service.route_wise_sales(db, branch_id, date_from, date_to)


@router.get("/field-staff-sales", response_model=List[FieldStaffSalesRow], summary="Sales per field staff")
def field_staff_sales(
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return report_service.field_staff_sales(db, branch_id, date_from, date_to)


@router.get("/brand-insights", response_model=List[BrandInsightRow], summary="Brand-wise sales")
def brand_insights(
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return report_service.brand_wise_insights(db, branch_id, date_from, date_to)


@router.get(
    "/customer-purchase-pattern",
    response_model=List[CustomerPurchaseRow],
    summary="Invoice frequency and value per customer",
)
def customer_purchase_pattern(
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return report_service.customer_purchase_pattern(db, branch_id, date_from, date_to)


@router.get("/sale-orders", response_model=List[OrderStatusSummaryRow], summary="Order count and value per status")
def sale_orders(
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return report_service.sale_order_summary(db, branch_id, date_from, date_to)


@router.get("/outstanding", response_model=List[OutstandingRow], summary="Age-wise outstanding")
def outstanding(
    branch_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    bucket: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    try:
        return report_service.age_wise_outstanding(db, branch_id, customer_id, bucket, date_from, date_to)
    except ValueError as exc:
        raise http_error(exc)


@router.get("/daily-stock", response_model=List[DailyStockRow], summary="Daily stock by branch and date")
def daily_stock(
    branch_id: Optional[int] = None,
    on_date: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return report_service.daily_stock(db, branch_id, on_date, date_from, date_to)
