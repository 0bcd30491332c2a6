# app/services/schedule_service.py
"""
Daily product schedule: which products are on offer on which day.
"""
import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.product_models import Product
from app.models.schedule_models import Schedule
from app.schemas.product_schemas import ProductOut
from app.schemas.schedule_schemas import DaySchedule, ProductSchedule, ScheduleCreate, ScheduleOut
from app.utils.activity_helpers import log_user_activity
from app.utils.date_utils import format_day, get_days_of_week, utcnow
from app.utils.errors import NotFoundError, StoreFailure, ValidationFailure


async def create_schedule(db: AsyncSession, data: ScheduleCreate, current_user=None) -> dict:
    product = await db.get(Product, data.product_id)
    if not product:
        raise ValidationFailure(f"Product {data.product_id} does not exist")

    schedule = Schedule(product_id=data.product_id, date=data.date)
    db.add(schedule)
    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} scheduled '{product.name}' on {data.date.isoformat()}",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to create schedule: {e}")

    await db.refresh(schedule)
    return {"message": "Schedule created successfully", "data": ScheduleOut.model_validate(schedule)}


async def delete_schedule(db: AsyncSession, schedule_id: int, current_user=None) -> dict:
    schedule = await db.get(Schedule, schedule_id)
    if not schedule:
        raise NotFoundError("Schedule not found")

    day = schedule.date
    await db.delete(schedule)
    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} removed schedule {schedule_id} on {day.isoformat()}",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to delete schedule: {e}")
    return {"message": "Schedule deleted successfully"}


async def list_schedules(
    db: AsyncSession,
    start_date: datetime.date,
    end_date: datetime.date,
    vendor_id: Optional[int] = None,
) -> List[DaySchedule]:
    """Schedules between ``start_date`` and ``end_date`` inclusive, one entry per day that has any."""
    if end_date < start_date:
        raise ValidationFailure("end_date must not be before start_date")

    stmt = (
        select(Schedule)
        .where(Schedule.date >= start_date, Schedule.date <= end_date)
        .order_by(Schedule.date, Schedule.id)
    )
    if vendor_id is not None:
        stmt = stmt.join(Product, Schedule.product_id == Product.id).where(Product.vendor_id == vendor_id)

    try:
        schedules = (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as e:
        raise StoreFailure(f"Failed to fetch schedules: {e}")

    days = {}
    for schedule in schedules:
        day = days.setdefault(schedule.date, DaySchedule(date=schedule.date, label=format_day(schedule.date)))
        day.product_schedules.append(ProductSchedule(
            schedule_id=schedule.id,
            product_id=schedule.product_id,
            product=ProductOut.model_validate(schedule.product),
        ))
    return list(days.values())


async def get_week_schedule(
    db: AsyncSession,
    start_date: Optional[datetime.date] = None,
    vendor_id: Optional[int] = None,
) -> List[DaySchedule]:
    """Storefront view: seven consecutive days, empty days included."""
    start_date = start_date or utcnow().date()
    week = get_days_of_week(start_date)
    scheduled = {d.date: d for d in await list_schedules(db, week[0], week[-1], vendor_id=vendor_id)}
    return [scheduled.get(day) or DaySchedule(date=day, label=format_day(day)) for day in week]
