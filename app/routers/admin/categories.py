from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.db import get_db
from app.services.category_service import create_category, list_categories, get_category, update_category, delete_category
from app.schemas.product_schemas import CategoryCreate, CategoryUpdate, CategoryResponse, CategoryListResponse
from app.schemas.response_schemas import MessageResponse
from app.utils.get_user import get_current_user
from app.utils.check_roles import require_role

router = APIRouter(prefix="/categories", tags=["Categories CRUD"])

@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
@require_role(["admin"])
async def create_category_route(data: CategoryCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_category(db, data, _user)

@router.get("", response_model=CategoryListResponse)
@require_role(["admin"])
async def list_categories_route(
    vendor_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await list_categories(db, vendor_id=vendor_id)

@router.get("/{category_id}", response_model=CategoryResponse)
@require_role(["admin"])
async def get_category_route(category_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_category(db, category_id)

@router.put("/{category_id}", response_model=CategoryResponse)
@require_role(["admin"])
async def update_category_route(category_id: int, data: CategoryUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await update_category(db, category_id, data, _user)

@router.delete("/{category_id}", response_model=MessageResponse)
@require_role(["admin"])
async def delete_category_route(category_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_category(db, category_id, _user)
