# app/schemas/activity_schemas.py
from pydantic import BaseModel
from typing import Optional, List

from app.schemas.response_schemas import UTCDateTime

class UserActivityOut(BaseModel):
    id: int
    user_id: Optional[int]
    username: Optional[str]
    message: str
    created_at: UTCDateTime

    class Config:
        from_attributes = True

class UserActivityListResponse(BaseModel):
    message: str
    total: int
    data: List[UserActivityOut]
