from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BulkUploadResult(BaseModel):
    reference_no: str
    upload_type: str
    total: int = 0
    success: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


class BulkUploadRefOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bulk_ref_id: int
    reference_no: str
    upload_type: str
    total_records: int
    success_records: int
    failed_records: int
    error_log: List[str] = []
    uploaded_by: Optional[int] = None
    file_name: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class BulkUploadQueued(BaseModel):
    status: str = "queued"
    task_id: str
    upload_type: str
