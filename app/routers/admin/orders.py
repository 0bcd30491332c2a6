from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.db import get_db
from app.models.order_models import OrderStatus
from app.services.order_service import get_order, list_orders, get_order_activities, get_order_report
from app.services.order_status_service import (
    advance_order_status, request_status_change, get_next_status_for_order, get_status_message,
)
from app.schemas.order_schemas import (
    OrderResponse, OrderListResponse, OrderActivityListResponse, OrderReportResponse,
    StatusAdvanceRequest, StatusChangeRequest,
)
from app.schemas.order_status_schemas import OrderTransitionResponse, NextStatusResponse
from app.utils.date_utils import TimeFrame
from app.utils.get_user import get_current_user
from app.utils.check_roles import require_role

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("", response_model=OrderListResponse)
@require_role(["admin"])
async def list_orders_route(
    status: Optional[OrderStatus] = Query(None),
    time_frame: Optional[TimeFrame] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    orders = await list_orders(db, status=status, time_frame=time_frame)
    return {"message": "Orders fetched successfully", "total": len(orders), "data": orders}


@router.get("/reports", response_model=OrderReportResponse)
@require_role(["admin"])
async def order_report_route(
    status: Optional[OrderStatus] = Query(None),
    time_frame: Optional[TimeFrame] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    report = await get_order_report(db, status=status, time_frame=time_frame)
    return {"message": "Order report generated successfully", "data": report}


@router.get("/{order_id}", response_model=OrderResponse)
@require_role(["admin"])
async def get_order_route(order_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    order = await get_order(db, order_id)
    return {"message": "Order fetched successfully", "data": order}


@router.get("/{order_id}/activities", response_model=OrderActivityListResponse)
@require_role(["admin"])
async def order_activities_route(order_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    activities = await get_order_activities(db, order_id)
    return {"message": "Order activities fetched successfully", "data": activities}


@router.get("/{order_id}/next-status", response_model=NextStatusResponse)
@require_role(["admin"])
async def next_status_route(order_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return {"message": "Next status fetched successfully", "data": await get_next_status_for_order(db, order_id)}


@router.post("/{order_id}/advance", response_model=OrderTransitionResponse)
@require_role(["admin"])
async def advance_order_route(
    order_id: int,
    data: Optional[StatusAdvanceRequest] = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """
    Move the order to the next status in the flow.
    Reaching "Invoice Issued" also generates one invoice per vendor.
    """
    transition = await advance_order_status(db, order_id, _user, notes=data.notes if data else None)
    return {"message": get_status_message(transition.to_status), "data": transition}


@router.put("/{order_id}/status", response_model=OrderTransitionResponse)
@require_role(["admin"])
async def change_order_status_route(
    order_id: int,
    data: StatusChangeRequest,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    transition = await request_status_change(db, order_id, data.status, _user, notes=data.notes)
    return {"message": get_status_message(transition.to_status), "data": transition}
