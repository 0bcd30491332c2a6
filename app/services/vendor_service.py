# app/services/vendor_service.py
import logging
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user_models import User
from app.models.vendor_models import Vendor
from app.schemas.vendor_schemas import VendorCreate, VendorUpdate, VendorOut
from app.utils.activity_helpers import log_user_activity
from app.utils.errors import NotFoundError, StoreFailure, ValidationFailure

logger = logging.getLogger(__name__)


async def _ensure_user_exists(db: AsyncSession, user_id):
    if user_id is None:
        return
    if not await db.get(User, user_id):
        raise ValidationFailure(f"User {user_id} does not exist")


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: int = None):
    stmt = select(Vendor.id).where(Vendor.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Vendor.id != exclude_id)
    if (await db.execute(stmt)).first():
        raise ValidationFailure(f"Vendor '{name}' already exists")


async def get_vendor_model(db: AsyncSession, vendor_id: int) -> Vendor:
    vendor = await db.get(Vendor, vendor_id)
    if not vendor:
        raise NotFoundError("Vendor not found")
    return vendor


# ---------------------------
# CREATE VENDOR
# ---------------------------
async def create_vendor(db: AsyncSession, data: VendorCreate, current_user=None) -> dict:
    await _ensure_unique_name(db, data.name)
    await _ensure_user_exists(db, data.user_id)

    vendor = Vendor(**data.model_dump())
    db.add(vendor)
    try:
        await db.flush()
        if current_user:
            await log_user_activity(
                db,
                current_user,
                message=f"{current_user.role.capitalize()} created vendor '{vendor.name}' (ID: {vendor.id})",
            )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationFailure(f"Vendor '{data.name}' already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to create vendor: {e}")

    await db.refresh(vendor)
    logger.info("Vendor %s created", vendor.name)
    return {"message": "Vendor created successfully", "data": VendorOut.model_validate(vendor)}


# ---------------------------
# LIST VENDORS
# ---------------------------
async def list_vendors(db: AsyncSession, include_inactive: bool = False) -> dict:
    stmt = select(Vendor).order_by(Vendor.name)
    if not include_inactive:
        stmt = stmt.where(Vendor.is_active == True)
    try:
        vendors = (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as e:
        raise StoreFailure(f"Failed to fetch vendors: {e}")

    return {
        "message": "Vendors fetched successfully",
        "total": len(vendors),
        "data": [VendorOut.model_validate(v) for v in vendors],
    }


async def list_storefront_vendors(db: AsyncSession) -> dict:
    """Active vendors; every vendor when none is active yet."""
    result = await list_vendors(db)
    if result["total"] == 0:
        result = await list_vendors(db, include_inactive=True)
    return result


# ---------------------------
# GET VENDOR
# ---------------------------
async def get_vendor(db: AsyncSession, vendor_id: int) -> dict:
    vendor = await get_vendor_model(db, vendor_id)
    return {"message": "Vendor fetched successfully", "data": VendorOut.model_validate(vendor)}


async def get_vendor_by_name(db: AsyncSession, name: str) -> Vendor:
    result = await db.execute(select(Vendor).where(func.lower(Vendor.name) == name.lower()))
    vendor = result.scalars().first()
    if not vendor:
        raise NotFoundError(f"Vendor '{name}' not found")
    return vendor


# ---------------------------
# UPDATE VENDOR
# ---------------------------
async def update_vendor(db: AsyncSession, vendor_id: int, data: VendorUpdate, current_user=None) -> dict:
    vendor = await get_vendor_model(db, vendor_id)
    changes = data.model_dump(exclude_unset=True)

    if "name" in changes and changes["name"] != vendor.name:
        await _ensure_unique_name(db, changes["name"], exclude_id=vendor.id)
    if "user_id" in changes:
        await _ensure_user_exists(db, changes["user_id"])

    for field, value in changes.items():
        setattr(vendor, field, value)

    if current_user and changes:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} updated vendor '{vendor.name}': {', '.join(changes)}",
        )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationFailure("Vendor with the same name already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to update vendor: {e}")

    await db.refresh(vendor)
    return {"message": "Vendor updated successfully", "data": VendorOut.model_validate(vendor)}


# ---------------------------
# DELETE VENDOR (soft delete)
# ---------------------------
async def delete_vendor(db: AsyncSession, vendor_id: int, current_user=None) -> dict:
    vendor = await get_vendor_model(db, vendor_id)
    vendor.is_active = False

    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} deactivated vendor '{vendor.name}'",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to delete vendor: {e}")

    logger.info("Vendor %s deactivated", vendor.name)
    return {"message": f"Vendor '{vendor.name}' deactivated successfully"}
