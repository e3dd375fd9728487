"""Upload-type strategies for the bulk engine."""
import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from sfa.core.config import settings
from sfa.core.exceptions import ValidationError
from sfa.models.branch import Branch
from sfa.models.customer import Customer
from sfa.models.inventory import AgeWiseOutstanding, DailyStock
from sfa.models.product import Brand, Product
from sfa.models.route import Route, RouteCustomerMapping, UserRouteMapping
from sfa.models.sales import SaleOrderHeader, SalesInvoiceDetail, SalesInvoiceHeader
from sfa.models.user import AppUser
from sfa.services.bulk.engine import (
    LOOKUP_CHUNK_SIZE,
    ColumnSpec,
    ParsedRow,
    ReferenceResolver,
    UnresolvedReference,
    UploadContext,
    UploadStrategy,
)
from sfa.services.pricing_service import aggregate_lines, calculate_line, customer_type_key
from sfa.utils.text_cleaner import normalize_lookup_key
from sfa.utils.values import ZERO, clean_decimal, coerce_amount, parse_date

logger = logging.getLogger(__name__)

BRANCH = ("Branch", Branch.branch_id, Branch.branch_name)
CUSTOMER = ("Customer", Customer.customer_id, Customer.customer_name)
PRODUCT_CODE = ("Product code", Product.product_id, Product.product_code)
PRODUCT_NAME = ("Product", Product.product_id, Product.product_name)
BRAND = ("Brand", Brand.brand_id, Brand.brand_name)
ROUTE_CODE = ("Route code", Route.route_id, Route.route_code)
ROUTE_NAME = ("Route", Route.route_id, Route.route_name)
ORDER_NO = ("Order", SaleOrderHeader.order_id, SaleOrderHeader.order_no)
USER_MOBILE = ("User mobile", AppUser.user_id, AppUser.mobile_no)


def _existing_codes(db: Session, column, codes: Set[str]) -> Set[str]:
    found: Set[str] = set()
    ordered = sorted(codes)
    for start in range(0, len(ordered), LOOKUP_CHUNK_SIZE):
        chunk = ordered[start:start + LOOKUP_CHUNK_SIZE]
        for (code,) in db.query(column).filter(func.lower(column).in_(chunk)).all():
            found.add(normalize_lookup_key(code))
    return found


def _amount(value: Optional[str]) -> Decimal:
    result = clean_decimal(value)
    return ZERO if result is None else result


def _date_or_today(row: ParsedRow, name: str, ctx: UploadContext) -> Optional[date]:
    raw = row.get(name)
    if not raw:
        return date.today()
    parsed = parse_date(raw)
    if parsed is None:
        ctx.fail(row, f"Invalid {name} '{raw}'")
    return parsed


# -------------------------------------------------
# MASTER DATA
# -------------------------------------------------

class CustomerUpload(UploadStrategy):
    upload_type = "customers"
    named_columns = True
    columns = (
        ColumnSpec("customer_code", required=True, aliases=("code",)),
        ColumnSpec("customer_name", required=True, aliases=("name", "customer")),
        ColumnSpec("shop_name", aliases=("shop",)),
        ColumnSpec("owner_name", aliases=("owner",)),
        ColumnSpec("customer_type", aliases=("type",)),
        ColumnSpec("mobile_no", aliases=("mobile", "mobile_number", "phone")),
        ColumnSpec("phone_no_2", aliases=("phone_2", "alternate_phone")),
        ColumnSpec("email", aliases=("email_id",)),
        ColumnSpec("gst_no", aliases=("gst", "gstin", "gst_number")),
        ColumnSpec("billing_address_1", aliases=("address_1", "address")),
        ColumnSpec("billing_address_2", aliases=("address_2",)),
        ColumnSpec("billing_address_3", aliases=("address_3",)),
        ColumnSpec("billing_city", aliases=("city",)),
        ColumnSpec("district"),
        ColumnSpec("latitude", aliases=("lat",)),
        ColumnSpec("longitude", aliases=("long", "lng")),
        ColumnSpec("route_code", aliases=("route",)),
    )
    reference_kinds = {"route": ROUTE_CODE}

    def __init__(self):
        self.existing: Set[str] = set()
        self.seen: Set[str] = set()

    def resolve_references(self, resolver: ReferenceResolver, rows: List[ParsedRow]) -> None:
        for row in rows:
            resolver.want("route", row.get("route_code"))

    def prepare(self, db: Session, rows: List[ParsedRow], ctx: UploadContext) -> None:
        codes = {normalize_lookup_key(row.get("customer_code")) for row in rows}
        self.existing = _existing_codes(db, Customer.customer_code, codes)

    def build_header(self, group: List[ParsedRow], ctx: UploadContext):
        row = group[0]
        code = row.get("customer_code").upper()
        key = normalize_lookup_key(code)
        if key in self.existing:
            ctx.fail(row, f"Customer code '{code}' already exists")
            return None
        if key in self.seen:
            ctx.fail(row, f"Duplicate customer code '{code}' in file")
            return None

        route_id = None
        if row.get("route_code"):
            try:
                route_id = ctx.resolver.resolve("route", row.get("route_code"))
            except UnresolvedReference as exc:
                ctx.fail(row, str(exc))
                return None

        self.seen.add(key)
        customer = Customer(
            customer_code=code,
            customer_name=row.get("customer_name"),
            shop_name=row.get("shop_name"),
            owner_name=row.get("owner_name"),
            customer_type=customer_type_key(row.get("customer_type")),
            mobile_no=row.get("mobile_no"),
            phone_no_2=row.get("phone_no_2"),
            email=row.get("email"),
            gst_no=row.get("gst_no"),
            billing_address_1=row.get("billing_address_1"),
            billing_address_2=row.get("billing_address_2"),
            billing_address_3=row.get("billing_address_3"),
            billing_city=row.get("billing_city"),
            district=row.get("district"),
            latitude=clean_decimal(row.get("latitude")),
            longitude=clean_decimal(row.get("longitude")),
            is_active=True,
            created_by=ctx.session.user_id,
        )
        if route_id is not None:
            customer.route_mappings.append(RouteCustomerMapping(route_id=route_id, is_active=True))
        return customer


class ProductUpload(UploadStrategy):
    upload_type = "products"
    named_columns = True
    columns = (
        ColumnSpec("product_code", required=True, aliases=("code", "item_code", "sku")),
        ColumnSpec("product_name", required=True, aliases=("name", "product", "item_name")),
        ColumnSpec("brand_name", aliases=("brand",)),
        ColumnSpec("category"),
        ColumnSpec("unit_of_measure", aliases=("uom", "unit")),
        ColumnSpec("hsn_code", aliases=("hsn",)),
        ColumnSpec("gst_rate", aliases=("gst", "gst_percentage", "tax_rate")),
        ColumnSpec("qty_in_ltr", aliases=("qty_in_litre", "litres", "ltr")),
        ColumnSpec("description"),
    )
    reference_kinds = {"brand": BRAND}

    def __init__(self):
        self.existing: Set[str] = set()
        self.seen: Set[str] = set()

    def resolve_references(self, resolver: ReferenceResolver, rows: List[ParsedRow]) -> None:
        for row in rows:
            resolver.want("brand", row.get("brand_name"))

    def prepare(self, db: Session, rows: List[ParsedRow], ctx: UploadContext) -> None:
        codes = {normalize_lookup_key(row.get("product_code")) for row in rows}
        self.existing = _existing_codes(db, Product.product_code, codes)

    def build_header(self, group: List[ParsedRow], ctx: UploadContext):
        row = group[0]
        code = row.get("product_code").upper()
        key = normalize_lookup_key(code)
        if key in self.existing:
            ctx.fail(row, f"Product code '{code}' already exists")
            return None
        if key in self.seen:
            ctx.fail(row, f"Duplicate product code '{code}' in file")
            return None
        self.seen.add(key)

        gst_rate = clean_decimal(row.get("gst_rate"))
        if gst_rate is None or gst_rate < 0:
            gst_rate = Decimal(str(settings.DEFAULT_GST_RATE))
        return Product(
            product_code=code,
            product_name=row.get("product_name"),
            # unknown brand names are not an error; the product has no brand
            brand_id=ctx.resolver.lookup("brand", row.get("brand_name")),
            category=row.get("category"),
            unit_of_measure=row.get("unit_of_measure") or "pcs",
            hsn_code=row.get("hsn_code"),
            gst_rate=gst_rate,
            qty_in_ltr=coerce_amount(row.get("qty_in_ltr")),
            description=row.get("description"),
            bulk_upload_ref=ctx.reference_no,
            is_active=True,
        )


# -------------------------------------------------
# STOCK AND OUTSTANDING
# -------------------------------------------------

class DailyStockUpload(UploadStrategy):
    upload_type = "daily_stock"
    columns = (
        ColumnSpec("branch_name", required=True),
        ColumnSpec("product_code", required=True),
        ColumnSpec("quantity", required=True),
        ColumnSpec("uploaded_date"),
    )
    reference_kinds = {"branch": BRANCH, "product": PRODUCT_CODE}

    def resolve_references(self, resolver: ReferenceResolver, rows: List[ParsedRow]) -> None:
        for row in rows:
            resolver.want("branch", row.get("branch_name"))
            resolver.want("product", row.get("product_code"))

    def build_header(self, group: List[ParsedRow], ctx: UploadContext):
        row = group[0]
        quantity = clean_decimal(row.get("quantity"))
        if quantity is None:
            ctx.fail(row, f"Invalid quantity '{row.get('quantity')}'")
            return None
        try:
            branch_id = ctx.resolver.resolve("branch", row.get("branch_name"))
            product_id = ctx.resolver.resolve("product", row.get("product_code"))
        except UnresolvedReference as exc:
            ctx.fail(row, str(exc))
            return None
        uploaded_date = _date_or_today(row, "uploaded_date", ctx)
        if uploaded_date is None:
            return None
        return DailyStock(
            branch_id=branch_id,
            product_id=product_id,
            quantity=quantity,
            uploaded_date=uploaded_date,
            uploaded_by=ctx.session.user_id,
        )


OUTSTANDING_AMOUNTS = (
    "dr_amount",
    "cr_amount",
    "balance",
    "less_than_45",
    "greater_than_45",
    "greater_than_60",
    "greater_than_90",
    "greater_than_120",
)


class OutstandingUpload(UploadStrategy):
    upload_type = "outstanding"
    columns = (
        ColumnSpec("as_on_date", required=True),
        ColumnSpec("branch_name", required=True),
        ColumnSpec("customer_name", required=True),
    ) + tuple(ColumnSpec(name) for name in OUTSTANDING_AMOUNTS)
    reference_kinds = {"branch": BRANCH, "customer": CUSTOMER}

    def resolve_references(self, resolver: ReferenceResolver, rows: List[ParsedRow]) -> None:
        for row in rows:
            resolver.want("branch", row.get("branch_name"))
            resolver.want("customer", row.get("customer_name"))

    def build_header(self, group: List[ParsedRow], ctx: UploadContext):
        row = group[0]
        as_on_date = parse_date(row.get("as_on_date"))
        if as_on_date is None:
            ctx.fail(row, f"Invalid as_on_date '{row.get('as_on_date')}'")
            return None
        try:
            branch_id = ctx.resolver.resolve("branch", row.get("branch_name"))
            customer_id = ctx.resolver.resolve("customer", row.get("customer_name"))
        except UnresolvedReference as exc:
            ctx.fail(row, str(exc))
            return None
        amounts = {name: _amount(row.get(name)) for name in OUTSTANDING_AMOUNTS}
        return AgeWiseOutstanding(
            as_on_date=as_on_date,
            branch_id=branch_id,
            customer_id=customer_id,
            uploaded_by=ctx.session.user_id,
            **amounts,
        )


# -------------------------------------------------
# INVOICES
# -------------------------------------------------

class InvoiceUpload(UploadStrategy):
    """
    One invoice per distinct invoice_no. The customer is taken from the
    invoice's first row; a bad customer fails every row of the invoice while a
    bad product fails only its own row. taxable_value and inclusive_tax_amt
    are read but totals are always recomputed from quantity, rate, discount
    and GST.
    """

    upload_type = "invoices"
    columns = (
        ColumnSpec("invoice_no", required=True),
        ColumnSpec("invoice_date"),
        ColumnSpec("order_no"),
        ColumnSpec("branch_name"),
        ColumnSpec("customer_name", required=True),
        ColumnSpec("product_name", required=True),
        ColumnSpec("quantity"),
        ColumnSpec("unit_rate"),
        ColumnSpec("disc_percentage"),
        ColumnSpec("taxable_value"),
        ColumnSpec("gst_rate"),
        ColumnSpec("inclusive_tax_amt"),
    )
    reference_kinds = {
        "customer": CUSTOMER,
        "product": PRODUCT_NAME,
        "branch": BRANCH,
        "order": ORDER_NO,
    }
    has_lines = True

    def __init__(self):
        self.products: Dict[int, Tuple[Optional[int], Decimal]] = {}
        self.orders: Dict[int, SaleOrderHeader] = {}

    def resolve_references(self, resolver: ReferenceResolver, rows: List[ParsedRow]) -> None:
        for row in rows:
            resolver.want("customer", row.get("customer_name"))
            resolver.want("product", row.get("product_name"))
            resolver.want("branch", row.get("branch_name"))
            resolver.want("order", row.get("order_no"))

    def prepare(self, db: Session, rows: List[ParsedRow], ctx: UploadContext) -> None:
        product_ids = sorted(ctx.resolver.resolved_ids("product"))
        for start in range(0, len(product_ids), LOOKUP_CHUNK_SIZE):
            chunk = product_ids[start:start + LOOKUP_CHUNK_SIZE]
            for product_id, brand_id, gst_rate in (
                db.query(Product.product_id, Product.brand_id, Product.gst_rate)
                .filter(Product.product_id.in_(chunk))
                .all()
            ):
                self.products[product_id] = (brand_id, gst_rate)

        order_ids = sorted(ctx.resolver.resolved_ids("order"))
        for start in range(0, len(order_ids), LOOKUP_CHUNK_SIZE):
            chunk = order_ids[start:start + LOOKUP_CHUNK_SIZE]
            for order in db.query(SaleOrderHeader).filter(SaleOrderHeader.order_id.in_(chunk)).all():
                self.orders[order.order_id] = order

    def group_rows(self, rows: List[ParsedRow]) -> List[List[ParsedRow]]:
        groups: "OrderedDict[str, List[ParsedRow]]" = OrderedDict()
        for row in rows:
            groups.setdefault(row.get("invoice_no"), []).append(row)
        return list(groups.values())

    def build_header(self, group: List[ParsedRow], ctx: UploadContext):
        first = group[0]
        try:
            customer_id = ctx.resolver.resolve("customer", first.get("customer_name"))
        except UnresolvedReference as exc:
            ctx.fail_all(group, str(exc))
            return None

        invoice_date = date.today()
        if first.get("invoice_date"):
            invoice_date = parse_date(first.get("invoice_date"))
            if invoice_date is None:
                ctx.fail_all(group, f"Invalid invoice_date '{first.get('invoice_date')}'")
                return None

        order = None
        order_id = ctx.resolver.lookup("order", first.get("order_no"))
        if order_id is not None:
            order = self.orders.get(order_id)

        return SalesInvoiceHeader(
            invoice_no=first.get("invoice_no"),
            invoice_date=invoice_date,
            order_id=order.order_id if order else None,
            order_no=first.get("order_no"),
            customer_id=customer_id,
            branch_id=ctx.resolver.lookup("branch", first.get("branch_name")),
            route_id=order.route_id if order else None,
            field_staff_id=(order.field_staff_id or order.created_by) if order else None,
            invoice_status="confirmed",
            payment_status="pending",
            bulk_upload_ref=ctx.reference_no,
            created_by=ctx.session.user_id,
        )

    def build_lines(self, header, group: List[ParsedRow], ctx: UploadContext) -> list:
        lines = []
        breakdowns = []
        for row in group:
            try:
                product_id = ctx.resolver.resolve("product", row.get("product_name"))
            except UnresolvedReference as exc:
                ctx.fail(row, str(exc))
                continue
            brand_id, product_gst = self.products.get(product_id, (None, ZERO))

            quantity = coerce_amount(row.get("quantity"))
            unit_price = coerce_amount(row.get("unit_rate"))
            discount_pct = coerce_amount(row.get("disc_percentage"))
            gst = clean_decimal(row.get("gst_rate"))
            tax_pct = coerce_amount(product_gst if gst is None else gst)

            breakdown = calculate_line(quantity, unit_price, discount_pct, tax_pct)
            breakdowns.append(breakdown)
            lines.append(
                SalesInvoiceDetail(
                    line_no=len(lines) + 1,
                    product_id=product_id,
                    brand_id=brand_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    discount_percentage=discount_pct,
                    discount_amount=breakdown.discount_amount,
                    tax_percentage=tax_pct,
                    tax_amount=breakdown.tax_amount,
                    line_total=breakdown.line_total,
                )
            )

        if lines:
            totals = aggregate_lines(breakdowns)
            header.total_amount = totals.gross_amount
            header.discount_amount = totals.discount_amount
            header.tax_amount = totals.tax_amount
            header.net_amount = totals.net_amount
            header.lines = lines
        return lines


# -------------------------------------------------
# ROUTE MAPPINGS
# -------------------------------------------------

class RouteCustomerUpload(UploadStrategy):
    """Upsert: each customer keeps one mapping, the last row for it wins."""

    upload_type = "route_customers"
    columns = (
        ColumnSpec("customer_name", required=True),
        ColumnSpec("route_name", required=True),
    )
    reference_kinds = {"customer": CUSTOMER, "route": ROUTE_NAME}

    def __init__(self):
        self.mappings: Dict[int, RouteCustomerMapping] = {}

    def resolve_references(self, resolver: ReferenceResolver, rows: List[ParsedRow]) -> None:
        for row in rows:
            resolver.want("customer", row.get("customer_name"))
            resolver.want("route", row.get("route_name"))

    def prepare(self, db: Session, rows: List[ParsedRow], ctx: UploadContext) -> None:
        customer_ids = sorted(ctx.resolver.resolved_ids("customer"))
        for start in range(0, len(customer_ids), LOOKUP_CHUNK_SIZE):
            chunk = customer_ids[start:start + LOOKUP_CHUNK_SIZE]
            existing = (
                db.query(RouteCustomerMapping)
                .filter(RouteCustomerMapping.customer_id.in_(chunk))
                .order_by(RouteCustomerMapping.mapping_id)
                .all()
            )
            for mapping in existing:
                self.mappings.setdefault(mapping.customer_id, mapping)

    def build_header(self, group: List[ParsedRow], ctx: UploadContext):
        row = group[0]
        try:
            customer_id = ctx.resolver.resolve("customer", row.get("customer_name"))
            route_id = ctx.resolver.resolve("route", row.get("route_name"))
        except UnresolvedReference as exc:
            ctx.fail(row, str(exc))
            return None

        mapping = self.mappings.get(customer_id)
        if mapping is None:
            mapping = RouteCustomerMapping(customer_id=customer_id)
            self.mappings[customer_id] = mapping
        mapping.route_id = route_id
        mapping.is_active = True
        return mapping


class RouteUserUpload(UploadStrategy):
    upload_type = "route_users"
    columns = (
        ColumnSpec("user_mobile", required=True),
        ColumnSpec("route_name", required=True),
    )
    reference_kinds = {"user": USER_MOBILE, "route": ROUTE_NAME}

    def __init__(self):
        self.pairs: Dict[Tuple[int, int], UserRouteMapping] = {}

    def resolve_references(self, resolver: ReferenceResolver, rows: List[ParsedRow]) -> None:
        for row in rows:
            resolver.want("user", row.get("user_mobile"))
            resolver.want("route", row.get("route_name"))

    def prepare(self, db: Session, rows: List[ParsedRow], ctx: UploadContext) -> None:
        user_ids = sorted(ctx.resolver.resolved_ids("user"))
        for start in range(0, len(user_ids), LOOKUP_CHUNK_SIZE):
            chunk = user_ids[start:start + LOOKUP_CHUNK_SIZE]
            for mapping in db.query(UserRouteMapping).filter(UserRouteMapping.user_id.in_(chunk)).all():
                self.pairs[(mapping.user_id, mapping.route_id)] = mapping

    def build_header(self, group: List[ParsedRow], ctx: UploadContext):
        row = group[0]
        try:
            user_id = ctx.resolver.resolve("user", row.get("user_mobile"))
            route_id = ctx.resolver.resolve("route", row.get("route_name"))
        except UnresolvedReference as exc:
            ctx.fail(row, str(exc))
            return None

        mapping = self.pairs.get((user_id, route_id))
        if mapping is None:
            mapping = UserRouteMapping(user_id=user_id, route_id=route_id)
            self.pairs[(user_id, route_id)] = mapping
        mapping.is_active = True
        return mapping


STRATEGIES = {
    strategy.upload_type: strategy
    for strategy in (
        CustomerUpload,
        ProductUpload,
        DailyStockUpload,
        OutstandingUpload,
        InvoiceUpload,
        RouteCustomerUpload,
        RouteUserUpload,
    )
}


def get_strategy(upload_type: str) -> UploadStrategy:
    """Fresh strategy instance for one upload run."""
    strategy_cls = STRATEGIES.get((upload_type or "").strip().lower())
    if strategy_cls is None:
        raise ValidationError(
            f"Unknown upload type '{upload_type}'. Expected one of: {', '.join(sorted(STRATEGIES))}"
        )
    return strategy_cls()
