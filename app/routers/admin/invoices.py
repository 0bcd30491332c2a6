from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.db import get_db
from app.models.invoice_models import InvoiceStatus
from app.services.invoice_service import (
    list_invoices, get_invoice, generate_invoices_for_order_id, mark_invoice_settled, update_invoice_status,
)
from app.schemas.invoice_schemas import (
    InvoiceResponse, InvoiceListResponse, InvoiceSettle, InvoiceStatusUpdate,
)
from app.utils.get_user import get_current_user
from app.utils.check_roles import require_role

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("", response_model=InvoiceListResponse)
@require_role(["admin"])
async def list_invoices_route(
    status: Optional[InvoiceStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    invoices = await list_invoices(db, status=status)
    return {"message": "Invoices fetched successfully", "total": len(invoices), "data": invoices}


@router.get("/vendor/{vendor_id}", response_model=InvoiceListResponse)
@require_role(["admin"])
async def vendor_invoices_route(vendor_id: str, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    invoices = await list_invoices(db, vendor_id=vendor_id)
    return {"message": "Vendor invoices fetched successfully", "total": len(invoices), "data": invoices}


@router.get("/order/{order_id}", response_model=InvoiceListResponse)
@require_role(["admin"])
async def order_invoices_route(order_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    invoices = await list_invoices(db, order_id=order_id)
    return {"message": "Order invoices fetched successfully", "total": len(invoices), "data": invoices}


@router.post("/generate/{order_id}", response_model=InvoiceListResponse)
@require_role(["admin"])
async def generate_invoices_route(order_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    """Create the invoices still missing for an order; existing ones are left alone."""
    invoices = await generate_invoices_for_order_id(db, order_id, _user)
    return {"message": f"{len(invoices)} invoice(s) generated", "total": len(invoices), "data": invoices}


@router.get("/{invoice_id}", response_model=InvoiceResponse)
@require_role(["admin"])
async def get_invoice_route(invoice_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return {"message": "Invoice fetched successfully", "data": await get_invoice(db, invoice_id)}


@router.post("/{invoice_id}/settle", response_model=InvoiceResponse)
@require_role(["admin"])
async def settle_invoice_route(
    invoice_id: int,
    data: Optional[InvoiceSettle] = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    invoice = await mark_invoice_settled(db, invoice_id, data.settled_date if data else None, _user)
    return {"message": "Invoice marked as settled", "data": invoice}


@router.put("/{invoice_id}/status", response_model=InvoiceResponse)
@require_role(["admin"])
async def update_invoice_status_route(
    invoice_id: int,
    data: InvoiceStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    invoice = await update_invoice_status(db, invoice_id, data.status, data.settled_date, _user)
    return {"message": f"Invoice status updated to {invoice.status.value}", "data": invoice}
