"""
Line pricing and header aggregation shared by orders, invoices and uploads.

All arithmetic is Decimal and unrounded; rounding happens when amounts are
written to Numeric(…, 2) columns or rendered.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from sfa.core.config import settings
from sfa.core.exceptions import ValidationError
from sfa.models.product import ProductPrice
from sfa.schemas.pricing import HeaderTotals, LineBreakdown
from sfa.utils.text_cleaner import normalize_lookup_key
from sfa.utils.values import ZERO, coerce_amount

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def calculate_line(
    quantity: Any,
    unit_price: Any,
    discount_percentage: Any = ZERO,
    tax_percentage: Any = ZERO,
) -> LineBreakdown:
    """
    Compute a line's monetary breakdown:
      base       = quantity * unit_price
      discount   = base * discount% / 100
      taxable    = base - discount
      tax        = taxable * tax% / 100
      line_total = taxable + tax

    Inputs go through coerce_amount, so blanks, junk and negatives count as 0.
    """
    quantity = coerce_amount(quantity)
    unit_price = coerce_amount(unit_price)
    discount_percentage = coerce_amount(discount_percentage)
    tax_percentage = coerce_amount(tax_percentage)

    base = quantity * unit_price
    discount_amount = base * discount_percentage / HUNDRED
    taxable_amount = base - discount_amount
    tax_amount = taxable_amount * tax_percentage / HUNDRED
    return LineBreakdown(
        gross_amount=base,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        tax_amount=tax_amount,
        line_total=taxable_amount + tax_amount,
    )


def aggregate_lines(lines: Iterable[LineBreakdown]) -> HeaderTotals:
    """Sum line breakdowns into header totals. Always a full recompute."""
    gross = discount = tax = net = ZERO
    for line in lines:
        gross += line.gross_amount
        discount += line.discount_amount
        tax += line.tax_amount
        net += line.line_total
    return HeaderTotals(
        gross_amount=gross,
        discount_amount=discount,
        tax_amount=tax,
        net_amount=net,
    )


def collection_balance(invoice_amount: Any, received_amount: Any) -> Decimal:
    """Outstanding on one collection line; not cumulative across collections."""
    return coerce_amount(invoice_amount) - coerce_amount(received_amount)


def customer_type_key(customer_type: Optional[str]) -> str:
    """Stored and compared form of a customer type: trimmed, lower-case, defaulted."""
    return normalize_lookup_key(customer_type) or normalize_lookup_key(settings.DEFAULT_CUSTOMER_TYPE)


def find_effective_price(
    db: Session,
    product_id: int,
    customer_type: Optional[str],
    on_date: date,
) -> Optional[ProductPrice]:
    """
    Return the active price row effective on ``on_date`` for the customer type.

    More than one match is a data problem; PRICE_CONFLICT_POLICY decides whether
    to take the most recent effective_from ("latest") or refuse ("reject").
    """
    customer_type = customer_type_key(customer_type)
    rows = (
        db.query(ProductPrice)
        .filter(
            ProductPrice.product_id == product_id,
            func.lower(func.trim(ProductPrice.customer_type)) == customer_type,
            ProductPrice.is_active.is_(True),
            ProductPrice.effective_from <= on_date,
            or_(ProductPrice.effective_to.is_(None), ProductPrice.effective_to >= on_date),
        )
        .order_by(ProductPrice.effective_from.desc(), ProductPrice.price_id.desc())
        .all()
    )
    if not rows:
        return None
    if len(rows) > 1:
        if settings.PRICE_CONFLICT_POLICY == "reject":
            raise ValidationError(
                f"Ambiguous price for product {product_id} ({customer_type}) on {on_date}: "
                f"{len(rows)} effective price rows"
            )
        logger.warning(
            "Multiple effective prices for product %s (%s) on %s; using price_id %s",
            product_id,
            customer_type,
            on_date,
            rows[0].price_id,
        )
    return rows[0]
