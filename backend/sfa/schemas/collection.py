from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PaymentMode = Literal["cash", "cheque", "upi", "neft"]
CollectionStatus = Literal["pending", "verified", "rejected"]


class CollectionLineIn(BaseModel):
    invoice_no: str = ""
    invoice_date: Optional[date] = None
    invoice_amount: Decimal = Field(default=Decimal("0"), ge=0)
    received_amount: Decimal = Field(default=Decimal("0"), ge=0)


class CollectionCreate(BaseModel):
    customer_id: Optional[int] = None
    branch_id: Optional[int] = None
    collection_date: date = Field(default_factory=date.today)
    amount: Decimal = Decimal("0")
    payment_mode: PaymentMode = "cash"
    payment_reference: Optional[str] = None
    cheque_no: Optional[str] = None
    cheque_date: Optional[date] = None
    bank_name: Optional[str] = None
    notes: Optional[str] = None
    lines: List[CollectionLineIn] = []

    @model_validator(mode="before")
    @classmethod
    def lower_payment_mode(cls, data):
        if isinstance(data, dict) and isinstance(data.get("payment_mode"), str):
            data = {**data, "payment_mode": data["payment_mode"].strip().lower()}
        return data


class CollectionStatusUpdate(BaseModel):
    collection_status: CollectionStatus


class CollectionLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    line_id: int
    invoice_no: str
    invoice_date: Optional[date] = None
    invoice_amount: Decimal
    received_amount: Decimal
    balance_amount: Decimal


class CollectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    collection_id: int
    collection_no: str
    collection_date: date
    customer_id: int
    branch_id: Optional[int] = None
    route_id: Optional[int] = None
    field_staff_id: Optional[int] = None
    amount: Decimal
    payment_mode: str
    payment_reference: Optional[str] = None
    cheque_no: Optional[str] = None
    cheque_date: Optional[date] = None
    bank_name: Optional[str] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None
    image_uploaded_at: Optional[datetime] = None
    collection_status: str
    created_at: Optional[datetime] = None
    lines: List[CollectionLineOut] = []
