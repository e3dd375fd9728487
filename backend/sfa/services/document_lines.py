"""Turn requested document lines into priced detail fields."""
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy.orm import Session

from sfa.core.exceptions import NotFoundError
from sfa.models.product import Product
from sfa.schemas.order import DocumentLineIn
from sfa.schemas.pricing import HeaderTotals, LineBreakdown
from sfa.services.pricing_service import calculate_line, find_effective_price
from sfa.utils.values import ZERO, coerce_amount


class PricedLine(NamedTuple):
    line_no: int
    product_id: int
    brand_id: Optional[int]
    quantity: Decimal
    unit_price: Decimal
    discount_percentage: Decimal
    tax_percentage: Decimal
    breakdown: LineBreakdown
    notes: Optional[str] = None

    def detail_fields(self) -> Dict:
        return {
            "line_no": self.line_no,
            "product_id": self.product_id,
            "brand_id": self.brand_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "discount_percentage": self.discount_percentage,
            "discount_amount": self.breakdown.discount_amount,
            "tax_percentage": self.tax_percentage,
            "tax_amount": self.breakdown.tax_amount,
            "line_total": self.breakdown.line_total,
        }


def price_document_lines(
    db: Session,
    lines: Iterable[DocumentLineIn],
    customer_type: Optional[str],
    on_date: date,
) -> List[PricedLine]:
    """
    Fill in defaults and compute every line.

    Missing unit price / discount % come from the effective price for the
    customer type on ``on_date``; missing tax % from the product's GST rate.
    """
    lines = list(lines)
    product_ids = {line.product_id for line in lines}
    products = {
        p.product_id: p
        for p in db.query(Product).filter(Product.product_id.in_(product_ids)).all()
    } if product_ids else {}

    priced: List[PricedLine] = []
    for idx, line in enumerate(lines, start=1):
        product = products.get(line.product_id)
        if not product:
            raise NotFoundError("Product", line.product_id)

        unit_price = line.unit_price
        discount_pct = line.discount_percentage
        if unit_price is None or discount_pct is None:
            price_row = find_effective_price(db, product.product_id, customer_type, on_date)
            if unit_price is None:
                unit_price = price_row.price if price_row else ZERO
            if discount_pct is None:
                discount_pct = price_row.discount_percentage if price_row else ZERO
        tax_pct = line.tax_percentage if line.tax_percentage is not None else product.gst_rate

        quantity = coerce_amount(line.quantity)
        unit_price = coerce_amount(unit_price)
        discount_pct = coerce_amount(discount_pct)
        tax_pct = coerce_amount(tax_pct)
        priced.append(
            PricedLine(
                line_no=idx,
                product_id=product.product_id,
                brand_id=product.brand_id,
                quantity=quantity,
                unit_price=unit_price,
                discount_percentage=discount_pct,
                tax_percentage=tax_pct,
                breakdown=calculate_line(quantity, unit_price, discount_pct, tax_pct),
                notes=line.notes,
            )
        )
    return priced


def apply_totals(header, totals: HeaderTotals) -> None:
    """Copy aggregated totals onto an order or invoice header row."""
    header.total_amount = totals.gross_amount
    header.discount_amount = totals.discount_amount
    header.tax_amount = totals.tax_amount
    header.net_amount = totals.net_amount
