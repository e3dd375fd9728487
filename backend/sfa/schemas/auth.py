from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["admin", "manager", "field_staff", "backend_user", "customer"]


class UserSession(BaseModel):
    """
    Identity of the caller, passed explicitly to services.

    Built per request from the user row; never stored globally.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    full_name: str
    mobile_no: str
    role: Role
    customer_id: Optional[int] = None

    @property
    def is_customer(self) -> bool:
        return self.role == "customer"

    @property
    def is_manager(self) -> bool:
        return self.role in ("admin", "manager")


class UserCreate(BaseModel):
    mobile_no: str = Field(..., min_length=5, examples=["9876543210"])
    full_name: str = Field(..., min_length=1)
    email: Optional[str] = None
    password: str = Field(..., min_length=4)
    role: Role = "field_staff"
    branch_id: Optional[int] = None
    is_active: bool = True


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    mobile_no: str
    full_name: str
    email: Optional[str] = None
    role: str
    is_active: bool
    branch_id: Optional[int] = None
    created_at: Optional[datetime] = None


class UserStatusUpdate(BaseModel):
    is_active: bool
