from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from sfa.models.base import Base


class SaleOrderHeader(Base):
    __tablename__ = "sale_order_headers"

    order_id = Column(Integer, primary_key=True, index=True)
    order_no = Column(String(40), nullable=False, index=True)  # ORD-<epoch ms>, not guaranteed unique
    order_date = Column(Date, nullable=False)

    customer_id = Column(Integer, ForeignKey("customers.customer_id"), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.branch_id"), nullable=True)
    route_id = Column(Integer, ForeignKey("routes.route_id"), nullable=True)
    field_staff_id = Column(Integer, ForeignKey("app_users.user_id"), nullable=True)

    order_type = Column(String(50), default="Visit Order")
    payment_type = Column(String(50), default="Cash on Delivery")
    mode_of_transport = Column(String(50), default="Own Vehicle")
    order_status = Column(String(20), nullable=False, default="confirmed")  # draft/confirmed/cancelled/invoiced

    total_amount = Column(Numeric(14, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(14, 2), nullable=False, default=0)
    net_amount = Column(Numeric(14, 2), nullable=False, default=0)
    remarks = Column(String(500))

    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    lines = relationship(
        "SaleOrderDetail",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="SaleOrderDetail.line_no",
    )
    customer = relationship("Customer")


class SaleOrderDetail(Base):
    __tablename__ = "sale_order_details"

    detail_id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("sale_order_headers.order_id"), nullable=False, index=True)
    line_no = Column(Integer, nullable=False)
    product_id = Column(Integer, ForeignKey("products.product_id"), nullable=False)
    brand_id = Column(Integer, ForeignKey("brands.brand_id"), nullable=True)

    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=0)
    tax_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(14, 2), nullable=False, default=0)
    line_total = Column(Numeric(14, 2), nullable=False, default=0)
    notes = Column(String(255))

    order = relationship("SaleOrderHeader", back_populates="lines")


class SalesInvoiceHeader(Base):
    __tablename__ = "sales_invoice_headers"

    invoice_id = Column(Integer, primary_key=True, index=True)
    invoice_no = Column(String(50), nullable=False, index=True)
    invoice_date = Column(Date, nullable=False)

    order_id = Column(Integer, ForeignKey("sale_order_headers.order_id"), nullable=True)
    order_no = Column(String(40), nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.customer_id"), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.branch_id"), nullable=True)
    route_id = Column(Integer, ForeignKey("routes.route_id"), nullable=True)
    field_staff_id = Column(Integer, ForeignKey("app_users.user_id"), nullable=True)

    invoice_status = Column(String(20), nullable=False, default="confirmed")
    payment_status = Column(String(20), nullable=False, default="pending")  # pending/paid/overdue

    total_amount = Column(Numeric(14, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(14, 2), nullable=False, default=0)
    net_amount = Column(Numeric(14, 2), nullable=False, default=0)

    bulk_upload_ref = Column(String(30), index=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    lines = relationship(
        "SalesInvoiceDetail",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="SalesInvoiceDetail.line_no",
    )
    customer = relationship("Customer")


class SalesInvoiceDetail(Base):
    __tablename__ = "sales_invoice_details"

    detail_id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("sales_invoice_headers.invoice_id"), nullable=False, index=True)
    line_no = Column(Integer, nullable=False)
    product_id = Column(Integer, ForeignKey("products.product_id"), nullable=False)
    brand_id = Column(Integer, ForeignKey("brands.brand_id"), nullable=True)

    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=0)
    tax_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(14, 2), nullable=False, default=0)
    line_total = Column(Numeric(14, 2), nullable=False, default=0)

    invoice = relationship("SalesInvoiceHeader", back_populates="lines")
