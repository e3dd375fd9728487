from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from sfa.core.config import settings
from sfa.core.exceptions import BulkUploadError, UploadFormatError, ValidationError
from sfa.models import (
    AgeWiseOutstanding,
    Branch,
    BulkUploadRef,
    Customer,
    DailyStock,
    Product,
    RouteCustomerMapping,
    SalesInvoiceHeader,
    UserRouteMapping,
)
from sfa.schemas.order import DocumentLineIn, OrderCreate
from sfa.services.bulk_upload_service import (
    get_bulk_reference,
    list_bulk_references,
    retire_bulk_reference,
    run_bulk_upload,
)
from sfa.services.order_service import create_order

STOCK_HEADER = "branch_name,product_code,quantity,uploaded_date"
INVOICE_HEADER = (
    "invoice_no,invoice_date,order_no,branch_name,customer_name,product_name,"
    "quantity,unit_rate,disc_percentage,taxable_value,gst_rate,inclusive_tax_amt"
)


def _csv(header, *rows):
    return "\n".join((header,) + rows) + "\n"


# -------------------------------------------------
# FILE LEVEL
# -------------------------------------------------

def test_empty_and_header_only_files_record_a_reference(db, seed, staff_session):
    empty = run_bulk_upload(db, "daily_stock", "", "empty.csv", staff_session)
    header_only = run_bulk_upload(db, "daily_stock", STOCK_HEADER + "\n\n", "stock.csv", staff_session)

    for result in (empty, header_only):
        assert (result.total, result.success, result.failed) == (0, 0, 0)
        assert result.errors == []
        ref = get_bulk_reference(db, result.reference_no)
        assert ref.status == "active"
        assert ref.total_records == 0
    assert db.query(BulkUploadRef).count() == 2
    assert db.query(DailyStock).count() == 0


def test_row_limit(db, seed, staff_session, monkeypatch):
    monkeypatch.setattr(settings, "BULK_UPLOAD_MAX_ROWS", 2)
    text = _csv(STOCK_HEADER, "Bangalore,P001,1,", "Bangalore,P001,2,", "Bangalore,P001,3,")
    with pytest.raises(UploadFormatError, match="row limit"):
        run_bulk_upload(db, "daily_stock", text, "stock.csv", staff_session)

    ref = db.query(BulkUploadRef).one()
    assert ref.status == "failed"
    assert (ref.total_records, ref.success_records, ref.failed_records) == (3, 0, 3)
    assert ref.error_log == ["Uploaded file exceeds row limit (2)."]
    assert db.query(DailyStock).count() == 0


def test_missing_named_column_fails_every_row(db, seed, staff_session):
    result = run_bulk_upload(
        db, "customers", _csv("code,shop", "C9,Shop", "C10,Other"), "c.csv", staff_session
    )

    assert (result.total, result.success, result.failed) == (2, 0, 2)
    assert result.errors == [
        "Line 2: Missing required fields (customer_name)",
        "Line 3: Missing required fields (customer_name)",
    ]
    assert get_bulk_reference(db, result.reference_no).failed_records == 2
    assert db.query(Customer).filter(Customer.customer_code == "C9").count() == 0


def test_unknown_upload_type(db, seed, staff_session):
    with pytest.raises(ValidationError, match="Unknown upload type"):
        run_bulk_upload(db, "suppliers", _csv("a", "b"), "s.csv", staff_session)


# -------------------------------------------------
# ROW OUTCOMES
# -------------------------------------------------

def test_unknown_references_fail_only_their_rows(db, seed, staff_session):
    text = _csv(
        STOCK_HEADER,
        "Bangalore,P001,10,2024-06-01",
        "Bangalore,NOPE,5,2024-06-01",
        "Mysore,P002,7,2024-06-01",
        "Bangalore,GONE,1,2024-06-01",
        "Mysore,P001,3,2024-06-01",
    )
    result = run_bulk_upload(db, "daily_stock", text, "stock.csv", staff_session)

    assert (result.total, result.success, result.failed) == (5, 3, 2)
    assert db.query(DailyStock).count() == 3
    assert result.errors == [
        "Line 3: Product code 'NOPE' not found",
        "Line 5: Product code 'GONE' not found",
    ]


def test_error_names_line_and_bad_value(db, seed, staff_session):
    text = _csv(
        STOCK_HEADER,
        "Bangalore,P001,10,",
        "Nowhere,P001,5,",
        "Mysore,P002,7,",
    )
    result = run_bulk_upload(db, "daily_stock", text, "stock.csv", staff_session)

    assert result.failed == 1
    assert "Line 3" in result.errors[0]
    assert "Nowhere" in result.errors[0]
    # blank uploaded_date means today
    assert {s.uploaded_date for s in db.query(DailyStock).all()} == {date.today()}


def test_names_match_case_insensitively_after_trimming(db, seed, staff_session):
    result = run_bulk_upload(
        db, "daily_stock", _csv(STOCK_HEADER, "  bangalore ,p001,2.5,2024-06-01"), "s.csv", staff_session
    )
    assert result.success == 1
    stock = db.query(DailyStock).one()
    assert stock.branch_id == seed["branch"].branch_id
    assert stock.product_id == seed["oil"].product_id
    assert stock.quantity == Decimal("2.5")


def test_non_ascii_names_match_case_insensitively(db, seed, staff_session):
    db.add(Branch(branch_code="EVR", branch_name="Évora Depot", is_active=True))
    db.commit()

    result = run_bulk_upload(
        db, "daily_stock", _csv(STOCK_HEADER, "ÉVORA DEPOT,P001,4,2024-06-01", "évora depot,P002,1,2024-06-01"),
        "s.csv", staff_session,
    )
    assert (result.success, result.failed) == (2, 0)
    assert {s.branch.branch_code for s in db.query(DailyStock).all()} == {"EVR"}


def test_malformed_rows_become_errors_not_exceptions(db, seed, staff_session):
    text = _csv(
        STOCK_HEADER,
        "Bangalore,P001",
        ",,,",
        "Bangalore,P001,abc,",
        "Bangalore,P001,4,not-a-date",
        "Bangalore,P001,4,2024-06-01,extra,fields",
    )
    result = run_bulk_upload(db, "daily_stock", text, "stock.csv", staff_session)

    assert (result.total, result.success, result.failed) == (5, 1, 4)
    assert result.errors[0] == "Line 2: Missing required fields (quantity)"
    assert result.errors[1] == "Line 3: Missing required fields (branch_name, product_code, quantity)"
    assert result.errors[2] == "Line 4: Invalid quantity 'abc'"
    assert result.errors[3].startswith("Line 5: Invalid uploaded_date")


def test_ambiguous_names_are_reported(db, seed, staff_session):
    db.add(Customer(customer_code="C003", customer_name="Sri Stores", customer_type="retail", is_active=True))
    db.commit()

    text = _csv(
        "as_on_date,branch_name,customer_name,dr_amount",
        "2024-06-30,Bangalore,Sri Stores,100",
        "2024-06-30,Bangalore,Metro Traders,200",
    )
    result = run_bulk_upload(db, "outstanding", text, "o.csv", staff_session)

    assert result.success == 1
    assert result.errors == ["Line 2: Customer 'Sri Stores' is ambiguous (2 matches)"]


def test_outstanding_amounts_default_to_zero(db, seed, staff_session):
    text = _csv(
        "as_on_date,branch_name,customer_name,dr_amount,cr_amount,balance,less_than_45",
        "2024-06-30,Bangalore,Metro Traders,1000,,1000,x",
        "not-a-date,Bangalore,Metro Traders,1,,,",
    )
    result = run_bulk_upload(db, "outstanding", text, "o.csv", staff_session)

    assert result.success == 1
    assert result.errors[0].startswith("Line 3: Invalid as_on_date")
    row = db.query(AgeWiseOutstanding).one()
    assert row.dr_amount == Decimal("1000")
    assert row.cr_amount == Decimal("0")
    assert row.less_than_45 == Decimal("0")
    assert row.greater_than_120 == Decimal("0")


# -------------------------------------------------
# MASTER DATA
# -------------------------------------------------

def test_customer_upload_with_routes_and_duplicates(db, seed, staff_session):
    text = _csv(
        "Code,Name,Type,Mobile,Route Code",
        "c100,New Shop,,9222222222,R2",
        "c101,Other Shop,wholesale,,RX",
        "C001,Existing,,,",
        "C100,Repeat,,,",
    )
    result = run_bulk_upload(db, "customers", text, "customers.csv", staff_session)

    assert (result.success, result.failed) == (1, 3)
    assert result.errors == [
        "Line 3: Route code 'RX' not found",
        "Line 4: Customer code 'C001' already exists",
        "Line 5: Duplicate customer code 'C100' in file",
    ]
    customer = db.query(Customer).filter(Customer.customer_code == "C100").one()
    assert customer.customer_type == settings.DEFAULT_CUSTOMER_TYPE
    assert [m.route_id for m in customer.route_mappings] == [seed["route_2"].route_id]


def test_customer_upload_lowercases_customer_type(db, seed, staff_session):
    result = run_bulk_upload(
        db, "customers", _csv("code,name,type", "c200,Upper Shop,WHOLESALE"), "c.csv", staff_session
    )
    assert result.success == 1
    customer = db.query(Customer).filter(Customer.customer_code == "C200").one()
    assert customer.customer_type == "wholesale"


def test_product_upload_defaults_and_retire(db, seed, staff_session):
    text = _csv(
        "Item Code,Product Name,Brand,GST,UOM",
        "np1,Neem Paste,acme,12,box",
        "np2,Tooth Brush,Unknown Brand,,",
        "np3,Salt,,0,",
        "p001,Clash,Acme,5,",
        "NP1,Again,,,",
    )
    result = run_bulk_upload(db, "products", text, "products.csv", staff_session)

    assert (result.total, result.success, result.failed) == (5, 3, 2)
    products = {p.product_code: p for p in db.query(Product).filter(Product.bulk_upload_ref == result.reference_no)}
    assert set(products) == {"NP1", "NP2", "NP3"}
    assert products["NP1"].brand_id == seed["brand"].brand_id
    assert products["NP1"].unit_of_measure == "box"
    assert products["NP2"].brand_id is None
    assert products["NP2"].gst_rate == Decimal(str(settings.DEFAULT_GST_RATE))
    assert products["NP2"].unit_of_measure == "pcs"
    assert products["NP3"].gst_rate == Decimal("0")

    ref = get_bulk_reference(db, result.reference_no)
    assert ref.status == "active"
    assert ref.success_records == 3
    assert ref.error_log == result.errors

    retire_bulk_reference(db, result.reference_no)
    db.expire_all()
    assert all(not p.is_active for p in db.query(Product).filter(Product.bulk_upload_ref == result.reference_no))
    assert db.get(Product, seed["oil"].product_id).is_active
    assert get_bulk_reference(db, result.reference_no).status == "deleted"


# -------------------------------------------------
# INVOICES
# -------------------------------------------------

def test_invoice_rows_group_and_customer_failure_cascades(db, seed, staff_session):
    text = _csv(
        INVOICE_HEADER,
        "B1,2024-06-10,,Bangalore,Sri Stores,Sunflower Oil 1L,10,100,5,,,",
        "B1,2024-06-10,,Bangalore,Sri Stores,Bath Soap,2,50,0,,12,",
        "B1,2024-06-10,,Bangalore,Sri Stores,Ghost Product,1,10,0,,,",
        "B2,2024-06-10,,Bangalore,Nobody,Bath Soap,1,10,0,,,",
        "B2,2024-06-10,,Bangalore,Sri Stores,Bath Soap,1,10,0,,,",
    )
    result = run_bulk_upload(db, "invoices", text, "invoices.csv", staff_session)

    assert (result.total, result.success, result.failed) == (5, 2, 3)
    assert result.errors == [
        "Line 4: Product 'Ghost Product' not found",
        "Line 5: Customer 'Nobody' not found",
        "Line 6: Customer 'Nobody' not found",
    ]

    invoice = db.query(SalesInvoiceHeader).one()
    assert invoice.invoice_no == "B1"
    assert invoice.invoice_date == date(2024, 6, 10)
    assert invoice.branch_id == seed["branch"].branch_id
    assert invoice.bulk_upload_ref == result.reference_no
    assert [line.line_no for line in invoice.lines] == [1, 2]
    # oil: 1000 - 5% + 5% GST (product rate) = 997.50; soap: 100 + 12% = 112
    assert invoice.lines[0].tax_percentage == Decimal("5")
    assert invoice.net_amount == Decimal("1109.5")
    assert invoice.total_amount == Decimal("1100")


def test_invoice_picks_route_and_staff_from_order(db, seed, staff_session):
    order = create_order(
        db,
        staff_session,
        OrderCreate(
            customer_id=seed["shop"].customer_id,
            lines=[DocumentLineIn(product_id=seed["oil"].product_id, quantity=Decimal("1"))],
        ),
    )
    text = _csv(
        INVOICE_HEADER,
        f"B9,,{order.order_no},Nowhere,Sri Stores,Sunflower Oil 1L,1,100,0,,,",
    )
    result = run_bulk_upload(db, "invoices", text, "invoices.csv", staff_session)

    assert result.success == 1
    invoice = db.query(SalesInvoiceHeader).one()
    assert invoice.order_id == order.order_id
    assert invoice.route_id == seed["route"].route_id
    assert invoice.field_staff_id == staff_session.user_id
    assert invoice.branch_id is None
    assert invoice.invoice_date == date.today()


def test_invoice_with_invalid_date_fails_every_row(db, seed, staff_session):
    text = _csv(
        INVOICE_HEADER,
        "B1,31-31-2024,,,Sri Stores,Bath Soap,1,10,0,,,",
        "B1,31-31-2024,,,Sri Stores,Bath Soap,1,10,0,,,",
    )
    result = run_bulk_upload(db, "invoices", text, "invoices.csv", staff_session)
    assert (result.success, result.failed) == (0, 2)
    assert db.query(SalesInvoiceHeader).count() == 0


# -------------------------------------------------
# ROUTE MAPPINGS
# -------------------------------------------------

def test_route_customer_upload_keeps_one_mapping_per_customer(db, seed, staff_session):
    text = _csv(
        "customer_name,route_name",
        "Sri Stores,South Loop",
        "Metro Traders,North Loop",
        "metro traders,south loop",
    )
    result = run_bulk_upload(db, "route_customers", text, "rc.csv", staff_session)

    assert result.success == 3
    mappings = db.query(RouteCustomerMapping).all()
    assert len(mappings) == 2
    by_customer = {m.customer_id: m.route_id for m in mappings}
    assert by_customer[seed["shop"].customer_id] == seed["route_2"].route_id
    assert by_customer[seed["dealer"].customer_id] == seed["route_2"].route_id


def test_route_user_upload_never_duplicates(db, seed, staff_session):
    text = _csv("user_mobile,route_name", "9000000002,North Loop", "9000000002,North Loop")
    run_bulk_upload(db, "route_users", text, "ru.csv", staff_session)
    db.query(UserRouteMapping).update({UserRouteMapping.is_active: False})
    db.commit()

    result = run_bulk_upload(db, "route_users", text, "ru.csv", staff_session)

    assert result.success == 2
    mapping = db.query(UserRouteMapping).one()
    assert mapping.is_active
    assert mapping.route_id == seed["route"].route_id


# -------------------------------------------------
# INSERT FAILURE
# -------------------------------------------------

def test_insert_failure_saves_nothing_and_records_failed_reference(db, seed, staff_session, monkeypatch):
    real_commit = db.commit
    calls = {"n": 0}

    def _commit():
        calls["n"] += 1
        if calls["n"] == 1:
            raise SQLAlchemyError("connection lost")
        real_commit()

    monkeypatch.setattr(db, "commit", _commit)
    text = _csv(STOCK_HEADER, "Bangalore,P001,10,", "Mysore,P002,4,")

    with pytest.raises(BulkUploadError, match="no records were saved"):
        run_bulk_upload(db, "daily_stock", text, "stock.csv", staff_session)

    assert db.query(DailyStock).count() == 0
    refs = list_bulk_references(db, status="failed")
    assert len(refs) == 1
    assert refs[0].failed_records == 2
    assert refs[0].success_records == 0
