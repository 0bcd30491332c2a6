# app/services/activity_service.py
from sqlalchemy import select, desc, asc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Literal, Optional, Tuple, get_args
from app.models.activity_models import UserActivity
from app.utils.errors import StoreFailure

ActivitySortField = Literal["id", "user_id", "username", "created_at"]
SortDirection = Literal["asc", "desc"]

ALLOWED_SORT_FIELDS = set(get_args(ActivitySortField))

async def get_user_activities(
    db: AsyncSession,
    user_id: Optional[int] = None,
    username: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: ActivitySortField = "created_at",
    order: SortDirection = "desc"
) -> Tuple[int, List[UserActivity]]:
    """
    Page through the audit log. ``search`` matches inside the message, so an
    order or invoice number finds every entry that touched it.
    """
    if sort_by not in ALLOWED_SORT_FIELDS:
        sort_by = "created_at"

    direction = desc if order.lower() == "desc" else asc
    sort_order = direction(getattr(UserActivity, sort_by))

    filters = []
    if user_id:
        filters.append(UserActivity.user_id == user_id)
    if username:
        filters.append(UserActivity.username.ilike(f"%{username}%"))
    if search:
        filters.append(UserActivity.message.ilike(f"%{search}%"))

    stmt = select(UserActivity)
    count_stmt = select(func.count(UserActivity.id))
    if filters:
        stmt = stmt.where(*filters)
        count_stmt = count_stmt.where(*filters)

    try:
        total = (await db.execute(count_stmt)).scalar() or 0

        # id breaks ties between rows written in the same second
        stmt = stmt.order_by(sort_order, direction(UserActivity.id)).offset((page - 1) * page_size).limit(page_size)
        result = await db.execute(stmt)
        activities = result.scalars().all()
    except SQLAlchemyError as e:
        raise StoreFailure(f"Failed to fetch activities: {e}")

    return total, activities
