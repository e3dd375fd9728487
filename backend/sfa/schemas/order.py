from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

OrderStatus = Literal["draft", "confirmed", "cancelled", "invoiced"]


class DocumentLineIn(BaseModel):
    """
    One requested line. Unit price, discount % and tax % fall back to the
    effective price and the product GST rate when omitted.
    """

    product_id: int
    quantity: Decimal = Field(..., ge=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    discount_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    tax_percentage: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class DocumentLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    detail_id: int
    line_no: int
    product_id: int
    brand_id: Optional[int] = None
    quantity: Decimal
    unit_price: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    tax_percentage: Decimal
    tax_amount: Decimal
    line_total: Decimal


class OrderLineOut(DocumentLineOut):
    notes: Optional[str] = None


class OrderCreate(BaseModel):
    customer_id: Optional[int] = None
    branch_id: Optional[int] = None
    order_date: date = Field(default_factory=date.today)
    order_type: str = "Visit Order"
    payment_type: str = "Cash on Delivery"
    mode_of_transport: str = "Own Vehicle"
    remarks: Optional[str] = None
    lines: List[DocumentLineIn] = []


class OrderLinesReplace(BaseModel):
    lines: List[DocumentLineIn]


class OrderStatusUpdate(BaseModel):
    order_status: OrderStatus


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: int
    order_no: str
    order_date: date
    customer_id: int
    branch_id: Optional[int] = None
    route_id: Optional[int] = None
    field_staff_id: Optional[int] = None
    order_type: Optional[str] = None
    payment_type: Optional[str] = None
    mode_of_transport: Optional[str] = None
    order_status: str
    total_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    net_amount: Decimal
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    lines: List[OrderLineOut] = []
