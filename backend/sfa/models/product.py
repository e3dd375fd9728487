from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from sfa.models.base import Base


class Brand(Base):
    __tablename__ = "brands"

    brand_id = Column(Integer, primary_key=True, index=True)
    brand_code = Column(String(50), unique=True, nullable=False)
    brand_name = Column(String(150), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship("Product", back_populates="brand")


class Product(Base):
    __tablename__ = "products"

    product_id = Column(Integer, primary_key=True, index=True)
    product_code = Column(String(50), unique=True, nullable=False)
    product_name = Column(String(255), nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("brands.brand_id"), nullable=True)

    category = Column(String(150))
    unit_of_measure = Column(String(20), nullable=False, default="pcs")
    hsn_code = Column(String(20))
    gst_rate = Column(Numeric(5, 2), nullable=False, default=18)
    qty_in_ltr = Column(Numeric(10, 3), default=0)
    description = Column(String(500))

    bulk_upload_ref = Column(String(30), index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    brand = relationship("Brand", back_populates="products")
    prices = relationship("ProductPrice", back_populates="product", cascade="all, delete-orphan")


class ProductPrice(Base):
    """
    Time-bounded price for one customer type.

    At most one active row should be effective for a (product, customer type, date);
    the database does not enforce it, see pricing lookups.
    """

    __tablename__ = "product_prices"

    price_id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.product_id"), nullable=False, index=True)
    customer_type = Column(String(50), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="prices")
