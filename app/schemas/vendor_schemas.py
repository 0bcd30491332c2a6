# app/schemas/vendor_schemas.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List

from app.schemas.response_schemas import UTCDateTime


class VendorCreate(BaseModel):
    """Schema for creating a new vendor"""
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    user_id: Optional[int] = None


class VendorUpdate(BaseModel):
    """Schema for updating an existing vendor"""
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    user_id: Optional[int] = None
    is_active: Optional[bool] = None


class VendorOut(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    user_id: Optional[int] = None
    is_active: bool
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = {"from_attributes": True}


class VendorResponse(BaseModel):
    message: str
    data: VendorOut


class VendorListResponse(BaseModel):
    message: str
    total: int
    data: List[VendorOut]
