from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.db import get_db
from app.services.product_service import create_product, list_products, get_product, update_product, delete_product
from app.schemas.product_schemas import ProductCreate, ProductUpdate, ProductResponse, ProductListResponse
from app.schemas.response_schemas import MessageResponse
from app.utils.get_user import get_current_user
from app.utils.check_roles import require_role

router = APIRouter(prefix="/products", tags=["Products CRUD"])

@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
@require_role(["admin"])
async def create_product_route(data: ProductCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_product(db, data, _user)

@router.get("", response_model=ProductListResponse)
@require_role(["admin"])
async def list_products_route(
    vendor: Optional[str] = Query(None, description="Vendor name"),
    category_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await list_products(db, vendor_name=vendor, category_id=category_id, search=search)

@router.get("/{product_id}", response_model=ProductResponse)
@require_role(["admin"])
async def get_product_route(product_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_product(db, product_id)

@router.put("/{product_id}", response_model=ProductResponse)
@require_role(["admin"])
async def update_product_route(product_id: int, data: ProductUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await update_product(db, product_id, data, _user)

@router.delete("/{product_id}", response_model=MessageResponse)
@require_role(["admin"])
async def delete_product_route(product_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_product(db, product_id, _user)
