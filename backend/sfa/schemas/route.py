from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RouteBase(BaseModel):
    route_code: str = Field(..., min_length=1, examples=["RT-01"])
    route_name: str = Field(..., min_length=1, examples=["Anna Nagar"])
    description: Optional[str] = None
    is_active: bool = True


class RouteCreate(RouteBase):
    pass


class RouteUpdate(RouteBase):
    pass


class RouteOut(RouteBase):
    model_config = ConfigDict(from_attributes=True)

    route_id: int
    created_at: Optional[datetime] = None


class RouteCustomerAssign(BaseModel):
    route_id: int
    customer_id: int
    is_active: bool = True


class RouteCustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    mapping_id: int
    route_id: int
    customer_id: int
    is_active: bool


class RouteUserAssign(BaseModel):
    route_id: int
    user_id: int


class RouteUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    mapping_id: int
    route_id: int
    user_id: int
    is_active: bool
