from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RouteSalesRow(BaseModel):
    route_id: Optional[int] = None
    route_name: str
    invoice_count: int
    customer_count: int
    total_amount: float
    discount_amount: float
    tax_amount: float
    net_amount: float


class FieldStaffSalesRow(BaseModel):
    field_staff_id: Optional[int] = None
    full_name: str
    invoice_count: int
    customer_count: int
    net_sales: float


class BrandInsightRow(BaseModel):
    brand_id: Optional[int] = None
    brand_name: str
    quantity: float
    amount: float
    product_count: int
    avg_unit_price: float


class CustomerPurchaseRow(BaseModel):
    customer_id: int
    customer_name: str
    invoice_count: int
    total_net: float
    avg_invoice_value: float
    first_invoice_date: date
    last_invoice_date: date


class OrderStatusSummaryRow(BaseModel):
    order_status: str
    order_count: int
    net_amount: float


class OutstandingRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    outstanding_id: int
    as_on_date: date
    branch_id: int
    branch_name: Optional[str] = None
    customer_id: int
    customer_name: Optional[str] = None
    dr_amount: float
    cr_amount: float
    balance: float
    less_than_45: float
    greater_than_45: float
    greater_than_60: float
    greater_than_90: float
    greater_than_120: float


class DailyStockRow(BaseModel):
    stock_id: int
    uploaded_date: date
    branch_id: int
    branch_name: Optional[str] = None
    product_id: int
    product_code: Optional[str] = None
    product_name: Optional[str] = None
    quantity: float


class DashboardCounts(BaseModel):
    customers: int
    products: int
    orders: int
    collections: int
