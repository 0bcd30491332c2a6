from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.services.vendor_service import create_vendor, list_vendors, get_vendor, update_vendor, delete_vendor
from app.schemas.vendor_schemas import VendorCreate, VendorUpdate, VendorResponse, VendorListResponse
from app.schemas.response_schemas import MessageResponse
from app.utils.get_user import get_current_user
from app.utils.check_roles import require_role

router = APIRouter(prefix="/vendors", tags=["Vendors CRUD"])

@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
@require_role(["admin"])
async def create_vendor_route(data: VendorCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_vendor(db, data, _user)

@router.get("", response_model=VendorListResponse)
@require_role(["admin"])
async def list_vendors_route(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await list_vendors(db, include_inactive=include_inactive)

@router.get("/{vendor_id}", response_model=VendorResponse)
@require_role(["admin"])
async def get_vendor_route(vendor_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_vendor(db, vendor_id)

@router.put("/{vendor_id}", response_model=VendorResponse)
@require_role(["admin"])
async def update_vendor_route(vendor_id: int, data: VendorUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await update_vendor(db, vendor_id, data, _user)

@router.delete("/{vendor_id}", response_model=MessageResponse)
@require_role(["admin"])
async def delete_vendor_route(vendor_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_vendor(db, vendor_id, _user)
