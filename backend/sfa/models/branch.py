from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from sfa.models.base import Base


class Branch(Base):
    __tablename__ = "branches"

    branch_id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.company_id"), index=True)
    branch_code = Column(String(50), unique=True, nullable=False)
    branch_name = Column(String(150), nullable=False)

    address_line_1 = Column(String(255))
    address_line_2 = Column(String(255))
    city = Column(String(100))
    state = Column(String(100))
    pincode = Column(String(20))
    phone = Column(String(20))

    # branches are deactivated, never deleted
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
