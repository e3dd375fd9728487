from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from sfa.schemas.order import DocumentLineIn, DocumentLineOut

PaymentStatus = Literal["pending", "paid", "overdue"]


class InvoiceCreate(BaseModel):
    customer_id: Optional[int] = None
    branch_id: Optional[int] = None
    invoice_no: Optional[str] = None
    invoice_date: date = Field(default_factory=date.today)
    lines: List[DocumentLineIn] = []


class InvoiceFromOrder(BaseModel):
    invoice_no: Optional[str] = None
    invoice_date: date = Field(default_factory=date.today)


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invoice_id: int
    invoice_no: str
    invoice_date: date
    order_id: Optional[int] = None
    order_no: Optional[str] = None
    customer_id: int
    branch_id: Optional[int] = None
    route_id: Optional[int] = None
    field_staff_id: Optional[int] = None
    invoice_status: str
    payment_status: str
    total_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    net_amount: Decimal
    bulk_upload_ref: Optional[str] = None
    created_at: Optional[datetime] = None
    lines: List[DocumentLineOut] = []
