from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.services.settings_service import get_settings, create_settings, update_settings
from app.schemas.settings_schemas import SettingsCreate, SettingsUpdate, SettingsResponse
from app.utils.get_user import get_current_user
from app.utils.check_roles import require_role

router = APIRouter(prefix="/settings", tags=["Settings"])

@router.get("", response_model=SettingsResponse)
@require_role(["admin"])
async def get_settings_route(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_settings(db)

@router.post("", response_model=SettingsResponse, status_code=status.HTTP_201_CREATED)
@require_role(["admin"])
async def create_settings_route(data: SettingsCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_settings(db, data, _user)

@router.put("/{settings_id}", response_model=SettingsResponse)
@require_role(["admin"])
async def update_settings_route(settings_id: int, data: SettingsUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await update_settings(db, settings_id, data, _user)
