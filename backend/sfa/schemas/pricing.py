from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class LineBreakdown(BaseModel):
    """Monetary breakdown of one document line."""

    model_config = ConfigDict(frozen=True)

    gross_amount: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    line_total: Decimal


class HeaderTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    gross_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    net_amount: Decimal
