from datetime import date
from decimal import Decimal

import pytest

from sfa.core.exceptions import ValidationError
from sfa.models import AgeWiseOutstanding, DailyStock
from sfa.schemas.invoice import InvoiceCreate
from sfa.schemas.order import DocumentLineIn, OrderCreate
from sfa.services.invoice_service import create_invoice
from sfa.services.order_service import create_order, update_order_status
from sfa.services.report_service import (
    age_wise_outstanding,
    brand_wise_insights,
    customer_purchase_pattern,
    dashboard_counts,
    daily_stock,
    field_staff_sales,
    route_wise_sales,
    sale_order_summary,
)


@pytest.fixture()
def invoices(db, seed, staff_session):
    def _invoice(customer, on_date, *lines):
        return create_invoice(
            db,
            staff_session,
            InvoiceCreate(
                customer_id=customer.customer_id,
                branch_id=seed["branch"].branch_id,
                invoice_date=on_date,
                lines=list(lines),
            ),
        )

    oil, soap = seed["oil"], seed["soap"]
    return [
        # 997.50 on route R1
        _invoice(seed["shop"], date(2024, 6, 1), DocumentLineIn(product_id=oil.product_id, quantity=10)),
        # 189.00 and 118.00, no route
        _invoice(seed["dealer"], date(2024, 6, 2), DocumentLineIn(product_id=oil.product_id, quantity=2)),
        _invoice(
            seed["dealer"],
            date(2024, 6, 20),
            DocumentLineIn(product_id=soap.product_id, quantity=1, unit_price=Decimal("100")),
        ),
    ]


def test_route_wise_sales_groups_unrouted_invoices(db, seed, invoices):
    rows = route_wise_sales(db)

    assert [r["route_name"] for r in rows] == ["North Loop", "Unassigned"]
    assert rows[0]["route_id"] == seed["route"].route_id
    assert rows[0]["net_amount"] == 997.5
    assert rows[1]["route_id"] is None
    assert rows[1]["invoice_count"] == 2
    assert rows[1]["customer_count"] == 1
    assert rows[1]["net_amount"] == 307.0


def test_route_wise_sales_date_filter(db, seed, invoices):
    rows = route_wise_sales(db, date_from=date(2024, 6, 2), date_to=date(2024, 6, 30))
    assert [r["route_name"] for r in rows] == ["Unassigned"]
    assert route_wise_sales(db, branch_id=seed["other_branch"].branch_id) == []


def test_field_staff_sales(db, seed, invoices):
    rows = field_staff_sales(db)
    assert rows == [
        {
            "field_staff_id": seed["staff"].user_id,
            "full_name": "Ravi",
            "invoice_count": 3,
            "customer_count": 2,
            "net_sales": 1304.5,
        }
    ]


def test_brand_wise_insights(db, seed, invoices):
    rows = brand_wise_insights(db)

    assert [r["brand_name"] for r in rows] == ["Acme", "No Brand"]
    acme, no_brand = rows
    assert acme["quantity"] == 12
    assert acme["amount"] == 1186.5
    assert acme["product_count"] == 1
    assert no_brand["brand_id"] is None
    assert no_brand["amount"] == 118.0


def test_customer_purchase_pattern(db, seed, invoices):
    rows = customer_purchase_pattern(db)

    dealer = next(r for r in rows if r["customer_id"] == seed["dealer"].customer_id)
    assert dealer["invoice_count"] == 2
    assert dealer["total_net"] == 307.0
    assert dealer["avg_invoice_value"] == 153.5
    assert dealer["first_invoice_date"] == date(2024, 6, 2)
    assert dealer["last_invoice_date"] == date(2024, 6, 20)
    assert rows[0]["customer_id"] == seed["shop"].customer_id


def test_reports_are_empty_without_invoices(db, seed):
    assert route_wise_sales(db) == []
    assert field_staff_sales(db) == []
    assert brand_wise_insights(db) == []
    assert customer_purchase_pattern(db) == []
    assert sale_order_summary(db) == []


def test_sale_order_summary_by_status(db, seed, staff_session):
    def _order(qty):
        return create_order(
            db,
            staff_session,
            OrderCreate(
                customer_id=seed["shop"].customer_id,
                order_date=date(2024, 6, 1),
                lines=[DocumentLineIn(product_id=seed["oil"].product_id, quantity=qty)],
            ),
        )

    _order(1)
    _order(2)
    update_order_status(db, _order(10).order_id, "cancelled")

    assert sale_order_summary(db) == [
        {"order_status": "cancelled", "order_count": 1, "net_amount": 997.5},
        {"order_status": "confirmed", "order_count": 2, "net_amount": 299.25},
    ]


def test_age_wise_outstanding_bucket_filter(db, seed):
    db.add_all(
        [
            AgeWiseOutstanding(
                as_on_date=date(2024, 6, 30),
                branch_id=seed["branch"].branch_id,
                customer_id=seed["shop"].customer_id,
                dr_amount=Decimal("500"),
                balance=Decimal("500"),
                greater_than_90=Decimal("500"),
            ),
            AgeWiseOutstanding(
                as_on_date=date(2024, 6, 30),
                branch_id=seed["branch"].branch_id,
                customer_id=seed["dealer"].customer_id,
                dr_amount=Decimal("80"),
                balance=Decimal("80"),
                less_than_45=Decimal("80"),
            ),
        ]
    )
    db.commit()

    assert len(age_wise_outstanding(db)) == 2
    overdue = age_wise_outstanding(db, bucket="greater_than_90")
    assert [r["customer_name"] for r in overdue] == ["Sri Stores"]
    assert overdue[0]["greater_than_90"] == 500.0
    assert overdue[0]["cr_amount"] == 0.0
    with pytest.raises(ValidationError, match="Unknown ageing bucket"):
        age_wise_outstanding(db, bucket="greater_than_30")


def test_daily_stock_report(db, seed):
    db.add_all(
        [
            DailyStock(
                branch_id=seed["branch"].branch_id,
                product_id=seed["oil"].product_id,
                quantity=Decimal("12.5"),
                uploaded_date=date(2024, 6, 1),
            ),
            DailyStock(
                branch_id=seed["other_branch"].branch_id,
                product_id=seed["soap"].product_id,
                quantity=Decimal("3"),
                uploaded_date=date(2024, 6, 2),
            ),
        ]
    )
    db.commit()

    rows = daily_stock(db)
    assert [r["uploaded_date"] for r in rows] == [date(2024, 6, 2), date(2024, 6, 1)]
    only_first = daily_stock(db, on_date=date(2024, 6, 1))
    assert only_first[0]["product_code"] == "P001"
    assert only_first[0]["quantity"] == 12.5
    assert daily_stock(db, branch_id=seed["other_branch"].branch_id)[0]["branch_name"] == "Mysore"


def test_dashboard_counts(db, seed, staff_session):
    assert dashboard_counts(db) == {"customers": 2, "products": 2, "orders": 0, "collections": 0}

    create_order(
        db,
        staff_session,
        OrderCreate(
            customer_id=seed["shop"].customer_id,
            lines=[DocumentLineIn(product_id=seed["soap"].product_id, quantity=1)],
        ),
    )
    assert dashboard_counts(db)["orders"] == 1
