# app/services/settings_service.py
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.settings_models import AppSettings
from app.schemas.settings_schemas import SettingsCreate, SettingsUpdate, SettingsOut
from app.utils.activity_helpers import log_user_activity
from app.utils.errors import NotFoundError, StoreFailure


async def get_latest_settings(db: AsyncSession) -> Optional[AppSettings]:
    # only the newest row is live; older rows are history
    result = await db.execute(
        select(AppSettings).order_by(AppSettings.created_at.desc(), AppSettings.id.desc()).limit(1)
    )
    return result.scalars().first()


async def get_settings(db: AsyncSession) -> dict:
    settings = await get_latest_settings(db)
    return {
        "message": "Settings fetched successfully" if settings else "No settings configured",
        "data": SettingsOut.model_validate(settings) if settings else None,
    }


async def create_settings(db: AsyncSession, data: SettingsCreate, current_user=None) -> dict:
    settings = AppSettings(**data.model_dump())
    db.add(settings)
    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} created settings for '{data.app_name}'",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to create settings: {e}")

    await db.refresh(settings)
    return {"message": "Settings created successfully", "data": SettingsOut.model_validate(settings)}


async def update_settings(db: AsyncSession, settings_id: int, data: SettingsUpdate, current_user=None) -> dict:
    settings = await db.get(AppSettings, settings_id)
    if not settings:
        raise NotFoundError("Settings not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(settings, field, value)

    if current_user and changes:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} updated settings: {', '.join(changes)}",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to update settings: {e}")

    await db.refresh(settings)
    return {"message": "Settings updated successfully", "data": SettingsOut.model_validate(settings)}
