from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerBase(BaseModel):
    customer_code: str = Field(..., min_length=1, examples=["CUS001"])
    customer_name: str = Field(..., min_length=1, examples=["Sri Murugan Stores"])
    shop_name: Optional[str] = None
    owner_name: Optional[str] = None
    customer_type: str = "retail"
    mobile_no: Optional[str] = None
    phone_no_2: Optional[str] = None
    email: Optional[str] = None
    gst_no: Optional[str] = None
    billing_address_1: Optional[str] = None
    billing_address_2: Optional[str] = None
    billing_address_3: Optional[str] = None
    billing_city: Optional[str] = None
    district: Optional[str] = None
    latitude: Optional[Decimal] = Field(default=None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(default=None, ge=-180, le=180)
    is_active: bool = True


class CustomerCreate(CustomerBase):
    route_id: Optional[int] = None


class CustomerUpdate(CustomerBase):
    pass


class CustomerOut(CustomerBase):
    model_config = ConfigDict(from_attributes=True)

    customer_id: int
    user_id: Optional[int] = None
    image_url_1: Optional[str] = None
    image_url_2: Optional[str] = None
    image_url_3: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
