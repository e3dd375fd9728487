from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func

from sfa.models.base import Base


class AppUser(Base):
    __tablename__ = "app_users"
    __table_args__ = (
        UniqueConstraint("mobile_no", name="uq_app_users_mobile_no"),
    )

    user_id = Column(Integer, primary_key=True, index=True)
    mobile_no = Column(String(20), nullable=False)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    password = Column(String(150), nullable=False)  # plain lookup, no hashing
    role = Column(String(50), nullable=False)  # admin/manager/field_staff/backend_user/customer
    is_active = Column(Boolean, default=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.branch_id"), nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
