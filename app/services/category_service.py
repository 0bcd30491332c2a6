# app/services/category_service.py
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.product_models import Category
from app.models.vendor_models import Vendor
from app.schemas.product_schemas import CategoryCreate, CategoryUpdate, CategoryOut
from app.utils.activity_helpers import log_user_activity
from app.utils.errors import NotFoundError, StoreFailure, ValidationFailure


async def _ensure_active_vendor(db: AsyncSession, vendor_id: int) -> Vendor:
    vendor = await db.get(Vendor, vendor_id)
    if not vendor or not vendor.is_active:
        raise ValidationFailure(f"Vendor {vendor_id} does not exist or is inactive")
    return vendor


async def get_category_model(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


async def create_category(db: AsyncSession, data: CategoryCreate, current_user=None) -> dict:
    await _ensure_active_vendor(db, data.vendor_id)

    category = Category(name=data.name, vendor_id=data.vendor_id)
    db.add(category)
    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} created category '{data.name}'",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to create category: {e}")

    await db.refresh(category)
    return {"message": "Category created successfully", "data": CategoryOut.model_validate(category)}


async def list_categories(db: AsyncSession, vendor_id: int = None) -> dict:
    stmt = select(Category).order_by(Category.name)
    if vendor_id is not None:
        stmt = stmt.where(Category.vendor_id == vendor_id)
    try:
        categories = (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as e:
        raise StoreFailure(f"Failed to fetch categories: {e}")
    return {
        "message": "Categories fetched successfully",
        "total": len(categories),
        "data": [CategoryOut.model_validate(c) for c in categories],
    }


async def get_category(db: AsyncSession, category_id: int) -> dict:
    category = await get_category_model(db, category_id)
    return {"message": "Category fetched successfully", "data": CategoryOut.model_validate(category)}


async def update_category(db: AsyncSession, category_id: int, data: CategoryUpdate, current_user=None) -> dict:
    category = await get_category_model(db, category_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "vendor_id" in changes:
        await _ensure_active_vendor(db, changes["vendor_id"])

    for field, value in changes.items():
        setattr(category, field, value)

    if current_user and changes:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} updated category '{category.name}'",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to update category: {e}")

    await db.refresh(category)
    return {"message": "Category updated successfully", "data": CategoryOut.model_validate(category)}


async def delete_category(db: AsyncSession, category_id: int, current_user=None) -> dict:
    category = await get_category_model(db, category_id)
    name = category.name
    await db.delete(category)
    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} deleted category '{name}'",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to delete category: {e}")
    return {"message": f"Category '{name}' deleted successfully"}
