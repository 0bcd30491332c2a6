# app/schemas/settings_schemas.py
from pydantic import BaseModel, Field
from typing import Optional

from app.schemas.response_schemas import UTCDateTime


class SettingsCreate(BaseModel):
    admin_phone_number: str = Field(..., min_length=1)
    app_name: str = Field(..., min_length=1)
    app_domain: str = ""


class SettingsUpdate(BaseModel):
    admin_phone_number: Optional[str] = Field(None, min_length=1)
    app_name: Optional[str] = Field(None, min_length=1)
    app_domain: Optional[str] = None


class SettingsOut(BaseModel):
    id: int
    admin_phone_number: str = ""
    app_name: str
    app_domain: str = ""
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = {"from_attributes": True}


class SettingsResponse(BaseModel):
    message: str
    data: Optional[SettingsOut] = None


class AppInfo(BaseModel):
    """Public subset of the settings shown on the storefront."""
    app_name: str
