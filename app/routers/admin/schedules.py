import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.db import get_db
from app.services.schedule_service import create_schedule, delete_schedule, list_schedules
from app.schemas.schedule_schemas import ScheduleCreate, ScheduleResponse, DayScheduleListResponse
from app.schemas.response_schemas import MessageResponse
from app.utils.get_user import get_current_user
from app.utils.check_roles import require_role

router = APIRouter(prefix="/schedules", tags=["Schedules"])

@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
@require_role(["admin"])
async def create_schedule_route(data: ScheduleCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_schedule(db, data, _user)

@router.get("", response_model=DayScheduleListResponse)
@require_role(["admin"])
async def list_schedules_route(
    start_date: datetime.date = Query(...),
    end_date: datetime.date = Query(...),
    vendor_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    days = await list_schedules(db, start_date, end_date, vendor_id=vendor_id)
    return {"message": "Schedules fetched successfully", "data": days}

@router.delete("/{schedule_id}", response_model=MessageResponse)
@require_role(["admin"])
async def delete_schedule_route(schedule_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_schedule(db, schedule_id, _user)
