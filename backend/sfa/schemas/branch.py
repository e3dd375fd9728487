from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BranchBase(BaseModel):
    company_id: Optional[int] = None
    branch_code: str = Field(..., min_length=1, examples=["BR001"])
    branch_name: str = Field(..., min_length=1, examples=["Chennai Central"])
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = Field(default=None, examples=["Chennai"])
    state: Optional[str] = Field(default=None, examples=["Tamil Nadu"])
    pincode: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True


class BranchCreate(BranchBase):
    pass


class BranchUpdate(BranchBase):
    pass


class BranchOut(BranchBase):
    model_config = ConfigDict(from_attributes=True)

    branch_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
