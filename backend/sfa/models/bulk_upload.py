from sqlalchemy import JSON, Column, DateTime, Integer, String, func

from sfa.models.base import Base


class BulkUploadRef(Base):
    """One row per bulk upload attempt, written after the insert phase."""

    __tablename__ = "bulk_upload_refs"

    bulk_ref_id = Column(Integer, primary_key=True, index=True)
    reference_no = Column(String(30), nullable=False, index=True)  # BU-<YYYYMMDD>-<5 digits>
    upload_type = Column(String(50), nullable=False)

    total_records = Column(Integer, nullable=False, default=0)
    success_records = Column(Integer, nullable=False, default=0)
    failed_records = Column(Integer, nullable=False, default=0)
    error_log = Column(JSON, nullable=False, default=list)

    uploaded_by = Column(Integer)
    file_name = Column(String(255))
    status = Column(String(20), nullable=False, default="active")  # active/failed/deleted
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
