from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from sfa.models.base import Base


class Collection(Base):
    __tablename__ = "collections"

    collection_id = Column(Integer, primary_key=True, index=True)
    collection_no = Column(String(40), nullable=False, index=True)  # COL-<epoch ms>
    collection_date = Column(Date, nullable=False)

    customer_id = Column(Integer, ForeignKey("customers.customer_id"), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.branch_id"), nullable=True)
    route_id = Column(Integer, ForeignKey("routes.route_id"), nullable=True)
    field_staff_id = Column(Integer, ForeignKey("app_users.user_id"), nullable=True)

    amount = Column(Numeric(14, 2), nullable=False)
    payment_mode = Column(String(20), nullable=False)  # cash/cheque/upi/neft
    payment_reference = Column(String(100))
    cheque_no = Column(String(50))
    cheque_date = Column(Date)
    bank_name = Column(String(150))
    notes = Column(String(500))

    image_url = Column(String(500))
    image_uploaded_at = Column(DateTime(timezone=True))

    collection_status = Column(String(20), nullable=False, default="pending")  # pending/verified/rejected
    collected_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lines = relationship("CollectionLine", back_populates="collection", cascade="all, delete-orphan")
    customer = relationship("Customer")


class CollectionLine(Base):
    __tablename__ = "collection_lines"

    line_id = Column(Integer, primary_key=True, index=True)
    collection_id = Column(Integer, ForeignKey("collections.collection_id"), nullable=False, index=True)
    invoice_no = Column(String(50), nullable=False)
    invoice_date = Column(Date)
    invoice_amount = Column(Numeric(14, 2), nullable=False, default=0)
    received_amount = Column(Numeric(14, 2), nullable=False, default=0)
    # invoice_amount - received_amount for this line only
    balance_amount = Column(Numeric(14, 2), nullable=False, default=0)
    remarks = Column(String(255))

    collection = relationship("Collection", back_populates="lines")
