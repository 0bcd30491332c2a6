# app/routers/auth/activity_router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.activity_schemas import UserActivityListResponse, UserActivityOut
from app.services.activity_service import ActivitySortField, SortDirection, get_user_activities
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user

router = APIRouter(prefix="/activities", tags=["Audit Log"])


@router.get("/", response_model=UserActivityListResponse)
@require_role(["admin"])
async def list_audit_log(
    user_id: Optional[int] = Query(None),
    username: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Text inside the message, e.g. an order number"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: ActivitySortField = Query("created_at"),
    order: SortDirection = Query("desc"),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """Back-office audit trail: who changed which order, invoice or registry entry."""
    total, activities = await get_user_activities(
        db,
        user_id=user_id,
        username=username,
        search=search,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order,
    )
    return UserActivityListResponse(
        message=f"{total} audit entr{'y' if total == 1 else 'ies'} found",
        total=total,
        data=[UserActivityOut.model_validate(a) for a in activities],
    )
