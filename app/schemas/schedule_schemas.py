# app/schemas/schedule_schemas.py
import datetime
from pydantic import BaseModel
from typing import List, Optional

from app.schemas.product_schemas import ProductOut
from app.schemas.response_schemas import UTCDateTime


class ScheduleCreate(BaseModel):
    product_id: int
    date: datetime.date


class ScheduleOut(BaseModel):
    id: int
    product_id: int
    date: datetime.date
    product: Optional[ProductOut] = None
    created_at: Optional[UTCDateTime] = None

    model_config = {"from_attributes": True}


class ProductSchedule(BaseModel):
    schedule_id: int
    product_id: int
    product: ProductOut


class DaySchedule(BaseModel):
    """All products offered on one day."""
    date: datetime.date
    label: str
    product_schedules: List[ProductSchedule] = []


class ScheduleResponse(BaseModel):
    message: str
    data: ScheduleOut


class DayScheduleListResponse(BaseModel):
    message: str
    data: List[DaySchedule]
