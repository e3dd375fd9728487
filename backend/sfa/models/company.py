from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from sfa.models.base import Base


class Company(Base):
    __tablename__ = "companies"

    company_id = Column(Integer, primary_key=True, index=True)
    company_code = Column(String(50), unique=True, nullable=False)
    company_name = Column(String(150), nullable=False)

    address = Column(String(255))
    city = Column(String(100))
    state = Column(String(100))
    country = Column(String(100))
    postal_code = Column(String(20))
    phone = Column(String(20))
    email = Column(String(150))
    website = Column(String(255))
    gstin = Column(String(20))
    pan = Column(String(20))

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
