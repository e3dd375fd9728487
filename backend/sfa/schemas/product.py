from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BrandBase(BaseModel):
    brand_code: str = Field(..., min_length=1)
    brand_name: str = Field(..., min_length=1)
    is_active: bool = True


class BrandCreate(BrandBase):
    pass


class BrandOut(BrandBase):
    model_config = ConfigDict(from_attributes=True)

    brand_id: int


class ProductBase(BaseModel):
    product_code: str = Field(..., min_length=1, examples=["P-1001"])
    product_name: str = Field(..., min_length=1, examples=["Engine Oil 1L"])
    brand_id: Optional[int] = None
    category: Optional[str] = None
    unit_of_measure: str = "pcs"
    hsn_code: Optional[str] = None
    gst_rate: Decimal = Field(default=Decimal("18"), ge=0, le=100)
    qty_in_ltr: Decimal = Field(default=Decimal("0"), ge=0)
    description: Optional[str] = None
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ProductBase):
    pass


class ProductOut(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    bulk_upload_ref: Optional[str] = None
    created_at: Optional[datetime] = None


class ProductPriceCreate(BaseModel):
    customer_type: str = "retail"
    price: Decimal = Field(..., ge=0)
    discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    effective_from: date
    effective_to: Optional[date] = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_range(self):
        if self.effective_to and self.effective_to < self.effective_from:
            raise ValueError("effective_to must not be before effective_from")
        return self


class ProductPriceOut(ProductPriceCreate):
    model_config = ConfigDict(from_attributes=True)

    price_id: int
    product_id: int


class EffectivePrice(BaseModel):
    product_id: int
    customer_type: str
    on_date: date
    price: Decimal
    discount_percentage: Decimal
    price_id: Optional[int] = None
