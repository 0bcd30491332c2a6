# app/services/product_service.py
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.models.product_models import Category, Product
from app.models.vendor_models import Vendor
from app.schemas.product_schemas import ProductCreate, ProductUpdate, ProductOut
from app.utils.activity_helpers import log_user_activity
from app.utils.errors import NotFoundError, StoreFailure, ValidationFailure


async def _ensure_vendor(db: AsyncSession, vendor_id: int) -> Vendor:
    vendor = await db.get(Vendor, vendor_id)
    if not vendor:
        raise ValidationFailure(f"Vendor {vendor_id} does not exist")
    return vendor


async def _load_categories(db: AsyncSession, category_ids: List[int]) -> List[Category]:
    if not category_ids:
        return []
    result = await db.execute(select(Category).where(Category.id.in_(category_ids)))
    categories = result.scalars().all()
    missing = set(category_ids) - {c.id for c in categories}
    if missing:
        raise ValidationFailure(f"Unknown category id(s): {sorted(missing)}")
    return list(categories)


async def get_product_model(db: AsyncSession, product_id: int) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


# ---------------------------------------------------
# CREATE PRODUCT
# ---------------------------------------------------
async def create_product(db: AsyncSession, data: ProductCreate, current_user=None) -> dict:
    await _ensure_vendor(db, data.vendor_id)
    categories = await _load_categories(db, data.category_ids)

    product = Product(**data.model_dump(exclude={"category_ids"}))
    product.categories = categories
    db.add(product)
    try:
        await db.flush()
        if current_user:
            await log_user_activity(
                db,
                current_user,
                message=f"{current_user.role.capitalize()} created product '{product.name}' (ID: {product.id})",
            )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Error creating product: {e}")

    await db.refresh(product)
    return {"message": "Product created successfully", "data": ProductOut.model_validate(product)}


# ---------------------------------------------------
# LIST PRODUCTS
# ---------------------------------------------------
async def list_products(
    db: AsyncSession,
    vendor_name: Optional[str] = None,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
) -> dict:
    """
    Fetch products, optionally narrowed to one vendor (by name, as the
    ``/s/{store}`` storefront pages address vendors) and/or one category.
    """
    stmt = select(Product).order_by(Product.name)
    if vendor_name:
        stmt = stmt.join(Vendor, Product.vendor_id == Vendor.id).where(
            func.lower(Vendor.name) == vendor_name.lower()
        )
    if category_id is not None:
        stmt = stmt.where(Product.categories.any(Category.id == category_id))
    if search:
        stmt = stmt.where(Product.name.ilike(f"%{search}%"))

    try:
        products = (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as e:
        raise StoreFailure(f"Failed to fetch products: {e}")

    return {
        "message": "Products fetched successfully",
        "total": len(products),
        "data": [ProductOut.model_validate(p) for p in products],
    }


# ---------------------------------------------------
# GET SINGLE PRODUCT
# ---------------------------------------------------
async def get_product(db: AsyncSession, product_id: int) -> dict:
    product = await get_product_model(db, product_id)
    return {"message": "Product fetched successfully", "data": ProductOut.model_validate(product)}


# ---------------------------------------------------
# UPDATE PRODUCT
# ---------------------------------------------------
async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate, current_user=None) -> dict:
    product = await get_product_model(db, product_id)
    changes = []

    fields = data.model_dump(exclude_unset=True, exclude={"category_ids"})
    if fields.get("vendor_id") is not None:
        await _ensure_vendor(db, fields["vendor_id"])

    for field, value in fields.items():
        if value is None and field not in ("stock",):
            continue
        if getattr(product, field) != value:
            changes.append(field)
            setattr(product, field, value)

    if data.category_ids is not None:
        product.categories = await _load_categories(db, data.category_ids)
        changes.append("categories")

    if current_user and changes:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} updated product '{product.name}': {', '.join(changes)}",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Error updating product: {e}")

    await db.refresh(product)
    return {"message": "Product updated successfully", "data": ProductOut.model_validate(product)}


# ---------------------------------------------------
# DELETE PRODUCT
# ---------------------------------------------------
async def delete_product(db: AsyncSession, product_id: int, current_user=None) -> dict:
    product = await get_product_model(db, product_id)
    name = product.name
    await db.delete(product)

    if current_user:
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} deleted product '{name}'",
        )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Error deleting product: {e}")
    return {"message": f"Product '{name}' deleted successfully"}
