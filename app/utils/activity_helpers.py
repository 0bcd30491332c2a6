# app/utils/activity_helpers.py
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.activity_models import UserActivity

async def log_user_activity(db: AsyncSession, user=None, message: str = "", commit: bool = False) -> Optional[UserActivity]:
    """
    Adds an admin audit-log row for ``user`` to the session. The caller is responsible for the commit.
    """
    if user is None:
        return None
    activity = UserActivity(
        user_id=user.id,
        username=user.username,
        message=message
    )
    db.add(activity)
    if commit:
        await db.commit()
    return activity
