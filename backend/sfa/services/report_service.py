"""
Sales reports computed with pandas over invoice and order rows.

Amounts are converted to float and rounded to 2 places for display.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from sfa.core.exceptions import ValidationError
from sfa.models.branch import Branch
from sfa.models.collection import Collection
from sfa.models.customer import Customer
from sfa.models.inventory import AgeWiseOutstanding, DailyStock
from sfa.models.product import Brand, Product
from sfa.models.route import Route
from sfa.models.sales import SaleOrderHeader, SalesInvoiceDetail, SalesInvoiceHeader
from sfa.models.user import AppUser

logger = logging.getLogger(__name__)

AGEING_BUCKETS = (
    "less_than_45",
    "greater_than_45",
    "greater_than_60",
    "greater_than_90",
    "greater_than_120",
)


def _money(value: Any) -> float:
    if value is None or pd.isna(value):
        return 0.0
    return round(float(value), 2)


def _optional_id(value: Any) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    return int(value)


def _invoice_query(db: Session, branch_id: Optional[int], date_from: Optional[date], date_to: Optional[date]):
    query = db.query(SalesInvoiceHeader)
    if branch_id is not None:
        query = query.filter(SalesInvoiceHeader.branch_id == branch_id)
    if date_from:
        query = query.filter(SalesInvoiceHeader.invoice_date >= date_from)
    if date_to:
        query = query.filter(SalesInvoiceHeader.invoice_date <= date_to)
    return query


def _invoice_frame(
    db: Session,
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> pd.DataFrame:
    query = (
        _invoice_query(db, branch_id, date_from, date_to)
        .outerjoin(Route, Route.route_id == SalesInvoiceHeader.route_id)
        .outerjoin(AppUser, AppUser.user_id == SalesInvoiceHeader.field_staff_id)
        .join(Customer, Customer.customer_id == SalesInvoiceHeader.customer_id)
        .with_entities(
            SalesInvoiceHeader.invoice_id,
            SalesInvoiceHeader.invoice_date,
            SalesInvoiceHeader.customer_id,
            Customer.customer_name,
            SalesInvoiceHeader.route_id,
            Route.route_name,
            SalesInvoiceHeader.field_staff_id,
            AppUser.full_name,
            SalesInvoiceHeader.total_amount,
            SalesInvoiceHeader.discount_amount,
            SalesInvoiceHeader.tax_amount,
            SalesInvoiceHeader.net_amount,
        )
    )
    df = pd.DataFrame([row._asdict() for row in query.all()])
    if df.empty:
        return df
    for col in ("total_amount", "discount_amount", "tax_amount", "net_amount"):
        df[col] = df[col].astype(float)
    return df


def route_wise_sales(
    db: Session,
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Dict[str, Any]]:
    df = _invoice_frame(db, branch_id, date_from, date_to)
    if df.empty:
        return []
    df["route_name"] = df["route_name"].fillna("Unassigned")
    grouped = (
        df.groupby(["route_id", "route_name"], dropna=False)
        .agg(
            invoice_count=("invoice_id", "nunique"),
            customer_count=("customer_id", "nunique"),
            total_amount=("total_amount", "sum"),
            discount_amount=("discount_amount", "sum"),
            tax_amount=("tax_amount", "sum"),
            net_amount=("net_amount", "sum"),
        )
        .reset_index()
        .sort_values("net_amount", ascending=False)
    )
    return [
        {
            "route_id": _optional_id(row.route_id),
            "route_name": row.route_name,
            "invoice_count": int(row.invoice_count),
            "customer_count": int(row.customer_count),
            "total_amount": _money(row.total_amount),
            "discount_amount": _money(row.discount_amount),
            "tax_amount": _money(row.tax_amount),
            "net_amount": _money(row.net_amount),
        }
        for row in grouped.itertuples(index=False)
    ]


def field_staff_sales(
    db: Session,
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Dict[str, Any]]:
    df = _invoice_frame(db, branch_id, date_from, date_to)
    if df.empty:
        return []
    df["full_name"] = df["full_name"].fillna("Unassigned")
    grouped = (
        df.groupby(["field_staff_id", "full_name"], dropna=False)
        .agg(
            invoice_count=("invoice_id", "nunique"),
            customer_count=("customer_id", "nunique"),
            net_sales=("net_amount", "sum"),
        )
        .reset_index()
        .sort_values("net_sales", ascending=False)
    )
    return [
        {
            "field_staff_id": _optional_id(row.field_staff_id),
            "full_name": row.full_name,
            "invoice_count": int(row.invoice_count),
            "customer_count": int(row.customer_count),
            "net_sales": _money(row.net_sales),
        }
        for row in grouped.itertuples(index=False)
    ]


def brand_wise_insights(
    db: Session,
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Dict[str, Any]]:
    query = (
        _invoice_query(db, branch_id, date_from, date_to)
        .join(SalesInvoiceDetail, SalesInvoiceDetail.invoice_id == SalesInvoiceHeader.invoice_id)
        .outerjoin(Brand, Brand.brand_id == SalesInvoiceDetail.brand_id)
        .with_entities(
            SalesInvoiceDetail.brand_id,
            Brand.brand_name,
            SalesInvoiceDetail.product_id,
            SalesInvoiceDetail.quantity,
            SalesInvoiceDetail.unit_price,
            SalesInvoiceDetail.line_total,
        )
    )
    df = pd.DataFrame([row._asdict() for row in query.all()])
    if df.empty:
        return []
    for col in ("quantity", "unit_price", "line_total"):
        df[col] = df[col].astype(float)
    df["brand_name"] = df["brand_name"].fillna("No Brand")
    grouped = (
        df.groupby(["brand_id", "brand_name"], dropna=False)
        .agg(
            quantity=("quantity", "sum"),
            amount=("line_total", "sum"),
            product_count=("product_id", "nunique"),
            avg_unit_price=("unit_price", "mean"),
        )
        .reset_index()
        .sort_values("amount", ascending=False)
    )
    return [
        {
            "brand_id": _optional_id(row.brand_id),
            "brand_name": row.brand_name,
            "quantity": round(float(row.quantity), 3),
            "amount": _money(row.amount),
            "product_count": int(row.product_count),
            "avg_unit_price": _money(row.avg_unit_price),
        }
        for row in grouped.itertuples(index=False)
    ]


def customer_purchase_pattern(
    db: Session,
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Dict[str, Any]]:
    df = _invoice_frame(db, branch_id, date_from, date_to)
    if df.empty:
        return []
    grouped = (
        df.groupby(["customer_id", "customer_name"])
        .agg(
            invoice_count=("invoice_id", "nunique"),
            total_net=("net_amount", "sum"),
            first_invoice_date=("invoice_date", "min"),
            last_invoice_date=("invoice_date", "max"),
        )
        .reset_index()
        .sort_values("total_net", ascending=False)
    )
    return [
        {
            "customer_id": int(row.customer_id),
            "customer_name": row.customer_name,
            "invoice_count": int(row.invoice_count),
            "total_net": _money(row.total_net),
            "avg_invoice_value": _money(row.total_net / row.invoice_count),
            "first_invoice_date": row.first_invoice_date,
            "last_invoice_date": row.last_invoice_date,
        }
        for row in grouped.itertuples(index=False)
    ]


def sale_order_summary(
    db: Session,
    branch_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Dict[str, Any]]:
    query = db.query(SaleOrderHeader.order_id, SaleOrderHeader.order_status, SaleOrderHeader.net_amount)
    if branch_id is not None:
        query = query.filter(SaleOrderHeader.branch_id == branch_id)
    if date_from:
        query = query.filter(SaleOrderHeader.order_date >= date_from)
    if date_to:
        query = query.filter(SaleOrderHeader.order_date <= date_to)
    df = pd.DataFrame([row._asdict() for row in query.all()])
    if df.empty:
        return []
    df["net_amount"] = df["net_amount"].astype(float)
    grouped = (
        df.groupby("order_status")
        .agg(order_count=("order_id", "count"), net_amount=("net_amount", "sum"))
        .reset_index()
        .sort_values("order_status")
    )
    return [
        {
            "order_status": row.order_status,
            "order_count": int(row.order_count),
            "net_amount": _money(row.net_amount),
        }
        for row in grouped.itertuples(index=False)
    ]


def age_wise_outstanding(
    db: Session,
    branch_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    bucket: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Outstanding rows; ``bucket`` keeps only rows with a non-zero amount in that ageing column."""
    if bucket and bucket not in AGEING_BUCKETS:
        raise ValidationError(f"Unknown ageing bucket '{bucket}'. Expected one of: {', '.join(AGEING_BUCKETS)}")

    query = (
        db.query(AgeWiseOutstanding, Branch.branch_name, Customer.customer_name)
        .outerjoin(Branch, Branch.branch_id == AgeWiseOutstanding.branch_id)
        .outerjoin(Customer, Customer.customer_id == AgeWiseOutstanding.customer_id)
    )
    if branch_id is not None:
        query = query.filter(AgeWiseOutstanding.branch_id == branch_id)
    if customer_id is not None:
        query = query.filter(AgeWiseOutstanding.customer_id == customer_id)
    if bucket:
        query = query.filter(getattr(AgeWiseOutstanding, bucket) > 0)
    if date_from:
        query = query.filter(AgeWiseOutstanding.as_on_date >= date_from)
    if date_to:
        query = query.filter(AgeWiseOutstanding.as_on_date <= date_to)

    rows = []
    for record, branch_name, customer_name in query.order_by(
        AgeWiseOutstanding.as_on_date.desc(), AgeWiseOutstanding.outstanding_id
    ).all():
        row = {
            "outstanding_id": record.outstanding_id,
            "as_on_date": record.as_on_date,
            "branch_id": record.branch_id,
            "branch_name": branch_name,
            "customer_id": record.customer_id,
            "customer_name": customer_name,
        }
        for col in ("dr_amount", "cr_amount", "balance") + AGEING_BUCKETS:
            row[col] = _money(getattr(record, col))
        rows.append(row)
    return rows


def daily_stock(
    db: Session,
    branch_id: Optional[int] = None,
    on_date: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Dict[str, Any]]:
    query = (
        db.query(DailyStock, Branch.branch_name, Product.product_code, Product.product_name)
        .join(Branch, Branch.branch_id == DailyStock.branch_id)
        .join(Product, Product.product_id == DailyStock.product_id)
    )
    if branch_id is not None:
        query = query.filter(DailyStock.branch_id == branch_id)
    if on_date:
        query = query.filter(DailyStock.uploaded_date == on_date)
    if date_from:
        query = query.filter(DailyStock.uploaded_date >= date_from)
    if date_to:
        query = query.filter(DailyStock.uploaded_date <= date_to)

    return [
        {
            "stock_id": stock.stock_id,
            "uploaded_date": stock.uploaded_date,
            "branch_id": stock.branch_id,
            "branch_name": branch_name,
            "product_id": stock.product_id,
            "product_code": product_code,
            "product_name": product_name,
            "quantity": round(float(stock.quantity), 3),
        }
        for stock, branch_name, product_code, product_name in query.order_by(
            DailyStock.uploaded_date.desc(), Branch.branch_name, Product.product_code
        ).all()
    ]


def dashboard_counts(db: Session) -> Dict[str, int]:
    """Record totals shown on the landing dashboard."""
    return {
        "customers": db.query(Customer).count(),
        "products": db.query(Product).count(),
        "orders": db.query(SaleOrderHeader).count(),
        "collections": db.query(Collection).count(),
    }
