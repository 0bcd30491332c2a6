# app/services/user_service.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from app.models.user_models import User
from app.core.security import hash_password
from app.schemas.user_schemas import UserCreate, UserUpdate
from app.utils.activity_helpers import log_user_activity
from app.utils.errors import NotFoundError, ValidationFailure

ALLOWED_ROLES = {"admin", "vendor", "user"}
MIN_PASSWORD_LENGTH = 6


def _validate_role(role: str):
    if role not in ALLOWED_ROLES:
        raise ValidationFailure(f"Role must be one of {sorted(ALLOWED_ROLES)}")


def _validate_password(password: str):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailure(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


# CREATE USER
async def create_user(db: AsyncSession, user_data: UserCreate, current_user=None):
    existing = await db.execute(select(User).where(User.username == user_data.username))
    if existing.scalars().first():
        raise ValidationFailure("Username already exists")

    _validate_role(user_data.role)
    _validate_password(user_data.password)

    new_user = User(
        username=user_data.username,
        password_hash=hash_password(user_data.password),
        role=user_data.role,
        email=user_data.email,
        name=user_data.name,
        phone_number=user_data.phone_number,
    )
    db.add(new_user)
    await db.flush()

    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} created user '{new_user.username}' with role {new_user.role}"
        )

    await db.commit()
    await db.refresh(new_user)
    return new_user


# LIST USERS
async def list_users(
    db: AsyncSession,
    role: str | None = None,
    is_active: bool | None = None,
    limit: int = 20,
    offset: int = 0
):
    """
    Return paginated, filtered list of users.
    Supports filtering by role and active/inactive status.
    """
    query = select(User)

    filters = []
    if role:
        filters.append(User.role == role)
    if is_active is not None:
        filters.append(User.is_active == is_active)

    if filters:
        query = query.where(and_(*filters))

    query = query.order_by(User.id).offset(offset).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()


# GET USER BY ID
async def get_user_by_id(db: AsyncSession, user_id: int):
    result = await db.execute(select(User).where(User.id == user_id, User.is_active == True))
    user = result.scalars().first()
    if not user:
        raise NotFoundError("User not found")
    return user


# UPDATE USER
async def update_user(db: AsyncSession, user_id: int, user_data: UserUpdate, current_user=None):
    user = await get_user_by_id(db, user_id)
    old_username = user.username
    changes = []

    if user_data.username and user_data.username != user.username:
        existing_check = await db.execute(select(User).where(User.username == user_data.username, User.id != user_id))
        if existing_check.scalars().first():
            raise ValidationFailure("Username already exists")
        user.username = user_data.username
        changes.append(f"username changed to '{user_data.username}'")

    if user_data.password:
        _validate_password(user_data.password)
        user.password_hash = hash_password(user_data.password)
        # existing sessions must log in again with the new password
        user.token_version += 1
        changes.append("password updated")

    if user_data.role and user_data.role != user.role:
        _validate_role(user_data.role)
        user.role = user_data.role
        changes.append(f"role changed to '{user_data.role}'")

    for field in ("email", "name", "phone_number"):
        value = getattr(user_data, field)
        if value is not None and value != getattr(user, field):
            setattr(user, field, value)
            changes.append(f"{field} updated")

    if current_user and changes:
        change_summary = ", ".join(changes)
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} updated {old_username}: {change_summary}"
        )

    await db.commit()
    await db.refresh(user)
    return user


# DELETE USER (soft delete)
async def delete_user(db: AsyncSession, user_id: int, current_user=None):
    user = await get_user_by_id(db, user_id)
    user.is_active = False
    user.token_version += 1

    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} deactivated user '{user.username}'"
        )

    await db.commit()
    return user
