from datetime import date
from decimal import Decimal

import pytest
from storage3.utils import StorageException

from sfa.core.config import settings
from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.core.storage import StorageClient, StorageError
from sfa.schemas.auth import UserSession
from sfa.schemas.collection import CollectionCreate
from sfa.schemas.invoice import InvoiceCreate, InvoiceFromOrder
from sfa.schemas.order import DocumentLineIn, OrderCreate
from sfa.services.collection_service import create_collection, update_collection_status
from sfa.services.invoice_service import (
    create_invoice,
    create_invoice_from_order,
    list_invoices,
    update_payment_status,
)
from sfa.services.order_service import (
    create_order,
    list_orders,
    replace_order_lines,
    update_order_status,
)


def _order_payload(seed, **overrides):
    data = {
        "customer_id": seed["shop"].customer_id,
        "branch_id": seed["branch"].branch_id,
        "order_date": date(2024, 6, 1),
        "lines": [DocumentLineIn(product_id=seed["oil"].product_id, quantity=Decimal("10"))],
    }
    data.update(overrides)
    return OrderCreate(**data)


# -------------------------------------------------
# ORDERS
# -------------------------------------------------

def test_order_uses_effective_price_and_product_gst(db, seed, staff_session):
    order = create_order(db, staff_session, _order_payload(seed))

    assert order.order_no.startswith("ORD-")
    assert order.order_status == "confirmed"
    assert order.route_id == seed["route"].route_id
    assert order.field_staff_id == staff_session.user_id
    line = order.lines[0]
    assert line.unit_price == Decimal("100")
    assert line.discount_percentage == Decimal("5")
    assert line.tax_percentage == Decimal("5")
    assert line.brand_id == seed["brand"].brand_id
    # 10 x 100 = 1000, less 5% = 950, plus 5% GST = 997.50
    assert order.total_amount == Decimal("1000")
    assert order.discount_amount == Decimal("50")
    assert order.tax_amount == Decimal("47.5")
    assert order.net_amount == Decimal("997.5")


def test_order_explicit_values_override_defaults(db, seed, staff_session):
    payload = _order_payload(
        seed,
        customer_id=seed["dealer"].customer_id,
        lines=[
            DocumentLineIn(
                product_id=seed["soap"].product_id,
                quantity=Decimal("10"),
                unit_price=Decimal("100"),
                discount_percentage=Decimal("5"),
                tax_percentage=Decimal("18"),
            )
        ],
    )
    order = create_order(db, staff_session, payload)

    assert order.route_id is None
    assert order.lines[0].discount_amount == Decimal("50")
    assert order.lines[0].tax_amount == Decimal("171")
    assert order.net_amount == Decimal("1121")


def test_order_requires_customer_and_lines(db, seed, staff_session):
    with pytest.raises(ValidationError, match="select a customer"):
        create_order(db, staff_session, _order_payload(seed, customer_id=None))
    with pytest.raises(ValidationError, match="at least one product"):
        create_order(db, staff_session, _order_payload(seed, lines=[]))


def test_order_with_unknown_product_is_rejected(db, seed, staff_session):
    payload = _order_payload(seed, lines=[DocumentLineIn(product_id=9999, quantity=Decimal("1"))])
    with pytest.raises(NotFoundError):
        create_order(db, staff_session, payload)


def test_customer_session_can_only_order_for_itself(db, seed):
    session = UserSession(
        user_id=seed["admin"].user_id,
        full_name="Sri Stores",
        mobile_no="9111111111",
        role="customer",
        customer_id=seed["shop"].customer_id,
    )
    order = create_order(db, session, _order_payload(seed, customer_id=None))
    assert order.customer_id == seed["shop"].customer_id

    with pytest.raises(ValidationError):
        create_order(db, session, _order_payload(seed, customer_id=seed["dealer"].customer_id))


def test_replace_lines_recomputes_totals(db, seed, staff_session):
    order = create_order(db, staff_session, _order_payload(seed))
    updated = replace_order_lines(
        db,
        order.order_id,
        [
            DocumentLineIn(product_id=seed["soap"].product_id, quantity=Decimal("2"), unit_price=Decimal("50")),
            DocumentLineIn(product_id=seed["oil"].product_id, quantity=Decimal("1")),
        ],
    )

    assert [line.line_no for line in updated.lines] == [1, 2]
    # soap: 100 + 18% = 118; oil: 95 + 5% = 99.75
    assert updated.net_amount == Decimal("217.75")
    assert updated.net_amount == updated.total_amount - updated.discount_amount + updated.tax_amount


def test_cancelled_order_cannot_be_edited(db, seed, staff_session):
    order = create_order(db, staff_session, _order_payload(seed))
    update_order_status(db, order.order_id, "cancelled")
    with pytest.raises(ValidationError):
        replace_order_lines(db, order.order_id, [DocumentLineIn(product_id=seed["oil"].product_id, quantity=1)])
    with pytest.raises(ValidationError):
        update_order_status(db, order.order_id, "shipped")


def test_list_orders_filters(db, seed, staff_session):
    create_order(db, staff_session, _order_payload(seed))
    create_order(db, staff_session, _order_payload(seed, customer_id=seed["dealer"].customer_id))

    assert len(list_orders(db)) == 2
    assert len(list_orders(db, customer_id=seed["dealer"].customer_id)) == 1
    assert len(list_orders(db, route_id=seed["route"].route_id)) == 1
    assert list_orders(db, date_from=date(2024, 7, 1)) == []


# -------------------------------------------------
# INVOICES
# -------------------------------------------------

def test_invoice_from_order_copies_lines_and_marks_order(db, seed, staff_session):
    order = create_order(db, staff_session, _order_payload(seed))
    invoice = create_invoice_from_order(db, staff_session, order.order_id, InvoiceFromOrder(invoice_date=date(2024, 6, 2)))

    assert invoice.invoice_no.startswith("INV-")
    assert invoice.order_no == order.order_no
    assert invoice.route_id == order.route_id
    assert invoice.field_staff_id == order.field_staff_id
    assert invoice.net_amount == order.net_amount
    assert len(invoice.lines) == len(order.lines)
    db.refresh(order)
    assert order.order_status == "invoiced"

    with pytest.raises(ValidationError, match="already invoiced"):
        create_invoice_from_order(db, staff_session, order.order_id, InvoiceFromOrder())


def test_direct_invoice_and_payment_status(db, seed, staff_session):
    invoice = create_invoice(
        db,
        staff_session,
        InvoiceCreate(
            customer_id=seed["dealer"].customer_id,
            invoice_no="TAX/001",
            invoice_date=date(2024, 6, 5),
            lines=[DocumentLineIn(product_id=seed["oil"].product_id, quantity=Decimal("2"))],
        ),
    )
    # wholesale price 90, no discount, 5% GST
    assert invoice.invoice_no == "TAX/001"
    assert invoice.net_amount == Decimal("189")
    assert invoice.payment_status == "pending"

    update_payment_status(db, invoice.invoice_id, "paid")
    assert [i.invoice_id for i in list_invoices(db, payment_status="paid")] == [invoice.invoice_id]
    with pytest.raises(ValidationError):
        update_payment_status(db, invoice.invoice_id, "refunded")


# -------------------------------------------------
# COLLECTIONS
# -------------------------------------------------

def _collection_payload(seed, **overrides):
    data = {
        "customer_id": seed["shop"].customer_id,
        "amount": Decimal("3000"),
        "payment_mode": "cash",
        "lines": [
            {"invoice_no": "INV-1", "invoice_amount": "5000", "received_amount": "3000"},
            {"invoice_no": "   ", "invoice_amount": "100", "received_amount": "0"},
        ],
    }
    data.update(overrides)
    return CollectionCreate(**data)


def test_collection_computes_line_balance_and_drops_blank_lines(db, seed, staff_session):
    collection = create_collection(db, staff_session, _collection_payload(seed))

    assert collection.collection_no.startswith("COL-")
    assert collection.collection_status == "pending"
    assert collection.route_id == seed["route"].route_id
    assert len(collection.lines) == 1
    assert collection.lines[0].balance_amount == Decimal("2000")
    assert collection.image_url is None


def test_collection_validation(db, seed, staff_session):
    with pytest.raises(ValidationError, match="select a customer"):
        create_collection(db, staff_session, _collection_payload(seed, customer_id=None))
    with pytest.raises(ValidationError, match="valid amount"):
        create_collection(db, staff_session, _collection_payload(seed, amount=Decimal("0")))
    with pytest.raises(ValidationError, match="collection detail"):
        create_collection(db, staff_session, _collection_payload(seed, lines=[{"invoice_no": ""}]))
    with pytest.raises(ValidationError, match="cheque_no"):
        create_collection(db, staff_session, _collection_payload(seed, payment_mode="CHEQUE", bank_name="SBI"))


def test_collection_stores_receipt(db, seed, staff_session, storage_bucket):
    collection = create_collection(
        db,
        staff_session,
        _collection_payload(seed),
        receipt=b"\x89PNG fake",
        receipt_filename="receipt.PNG",
        receipt_content_type="image/png",
    )

    assert collection.image_url.startswith("https://storage.test/uploads/collection-receipts/")
    assert collection.image_url.endswith(".png")
    assert collection.image_uploaded_at is not None
    [(path, (content, options))] = storage_bucket.files.items()
    assert path.startswith("collection-receipts/")
    assert content == b"\x89PNG fake"
    assert options["content-type"] == "image/png"


def test_collection_saved_without_image_when_storage_fails(db, seed, staff_session, storage_bucket):
    storage_bucket.error = StorageException("bucket not found")
    collection = create_collection(
        db,
        staff_session,
        _collection_payload(seed),
        receipt=b"data",
        receipt_filename="r.jpg",
    )
    assert collection.collection_id is not None
    assert collection.image_url is None


def test_storage_client_requires_credentials(monkeypatch):
    monkeypatch.undo()
    monkeypatch.setattr(StorageClient, "_client", None)
    monkeypatch.setattr(settings, "SUPABASE_URL", "")
    with pytest.raises(StorageError, match="credentials not configured"):
        StorageClient.upload(b"data", "collection-receipts/r.jpg", "image/jpeg")


def test_collection_status_transitions(db, seed, staff_session):
    collection = create_collection(db, staff_session, _collection_payload(seed))
    assert update_collection_status(db, collection.collection_id, "verified").collection_status == "verified"
    with pytest.raises(ValidationError):
        update_collection_status(db, collection.collection_id, "lost")
