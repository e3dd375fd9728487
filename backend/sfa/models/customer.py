from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from sfa.models.base import Base


class Customer(Base):
    __tablename__ = "customers"

    customer_id = Column(Integer, primary_key=True, index=True)
    customer_code = Column(String(50), unique=True, nullable=False)
    customer_name = Column(String(255), nullable=False, index=True)
    shop_name = Column(String(255))
    owner_name = Column(String(255))
    customer_type = Column(String(50), nullable=False, default="retail")

    mobile_no = Column(String(20), index=True)
    phone_no_2 = Column(String(20))
    email = Column(String(255))
    gst_no = Column(String(30))

    billing_address_1 = Column(String(255))
    billing_address_2 = Column(String(255))
    billing_address_3 = Column(String(255))
    billing_city = Column(String(100))
    district = Column(String(100))

    latitude = Column(Numeric(10, 7))
    longitude = Column(Numeric(10, 7))

    image_url_1 = Column(String(500))
    image_url_2 = Column(String(500))
    image_url_3 = Column(String(500))

    user_id = Column(Integer, ForeignKey("app_users.user_id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    route_mappings = relationship("RouteCustomerMapping", back_populates="customer", cascade="all, delete-orphan")
