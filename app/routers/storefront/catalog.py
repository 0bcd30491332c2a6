# app/routers/storefront/catalog.py
import datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.config import DEFAULT_APP_NAME
from app.core.db import get_db
from app.schemas.product_schemas import ProductListResponse
from app.schemas.response_schemas import ResponseMessage
from app.schemas.schedule_schemas import DayScheduleListResponse
from app.schemas.settings_schemas import AppInfo
from app.schemas.vendor_schemas import VendorListResponse
from app.services.product_service import list_products
from app.services.schedule_service import get_week_schedule
from app.services.settings_service import get_latest_settings
from app.services.vendor_service import get_vendor_by_name, list_storefront_vendors

router = APIRouter(tags=["Storefront"])


@router.get("/app-info", response_model=ResponseMessage[AppInfo])
async def app_info(db: AsyncSession = Depends(get_db)):
    settings = await get_latest_settings(db)
    return {
        "message": "App info fetched successfully",
        "data": {"app_name": settings.app_name if settings else DEFAULT_APP_NAME},
    }


@router.get("/vendors", response_model=VendorListResponse)
async def storefront_vendors(db: AsyncSession = Depends(get_db)):
    return await list_storefront_vendors(db)


@router.get("/products", response_model=ProductListResponse)
async def storefront_products(
    store: Optional[str] = Query(None, description="Vendor name"),
    category_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await list_products(db, vendor_name=store, category_id=category_id)


@router.get("/schedule", response_model=DayScheduleListResponse)
async def storefront_schedule(
    start_date: Optional[datetime.date] = Query(None),
    store: Optional[str] = Query(None, description="Vendor name"),
    db: AsyncSession = Depends(get_db),
):
    """Seven days of scheduled products starting at ``start_date`` (today by default)."""
    vendor_id = (await get_vendor_by_name(db, store)).id if store else None
    days = await get_week_schedule(db, start_date, vendor_id=vendor_id)
    return {"message": "Schedule fetched successfully", "data": days}
