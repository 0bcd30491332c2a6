# app/routers/storefront/orders.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.order_schemas import OrderResponse
from app.services.order_service import get_order_by_number
from app.services.order_status_service import get_status_message

router = APIRouter(prefix="/orders", tags=["Storefront Orders"])


@router.get("/{order_number}", response_model=OrderResponse)
async def track_order(order_number: str, db: AsyncSession = Depends(get_db)):
    order = await get_order_by_number(db, order_number)
    return {"message": get_status_message(order.status), "data": order}
