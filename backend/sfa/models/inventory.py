from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, func
from sqlalchemy.orm import relationship

from sfa.models.base import Base


class DailyStock(Base):
    __tablename__ = "daily_stock"

    stock_id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.branch_id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.product_id"), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    uploaded_date = Column(Date, nullable=False)
    uploaded_by = Column(Integer)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    branch = relationship("Branch")
    product = relationship("Product")


class AgeWiseOutstanding(Base):
    __tablename__ = "age_wise_outstanding"

    outstanding_id = Column(Integer, primary_key=True, index=True)
    as_on_date = Column(Date, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.branch_id"), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.customer_id"), nullable=False)

    dr_amount = Column(Numeric(14, 2), nullable=False, default=0)
    cr_amount = Column(Numeric(14, 2), nullable=False, default=0)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    less_than_45 = Column(Numeric(14, 2), nullable=False, default=0)
    greater_than_45 = Column(Numeric(14, 2), nullable=False, default=0)
    greater_than_60 = Column(Numeric(14, 2), nullable=False, default=0)
    greater_than_90 = Column(Numeric(14, 2), nullable=False, default=0)
    greater_than_120 = Column(Numeric(14, 2), nullable=False, default=0)

    uploaded_by = Column(Integer)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    branch = relationship("Branch")
    customer = relationship("Customer")
