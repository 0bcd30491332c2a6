# app/schemas/order_status_schemas.py
from pydantic import BaseModel
from typing import List, Optional

from app.models.order_models import OrderStatus
from app.schemas.invoice_schemas import InvoiceOut
from app.schemas.order_schemas import OrderOut


class OrderTransitionOut(BaseModel):
    order: OrderOut
    from_status: OrderStatus
    to_status: OrderStatus
    invoices: List[InvoiceOut] = []


class OrderTransitionResponse(BaseModel):
    message: str
    data: OrderTransitionOut


class NextStatusOut(BaseModel):
    current_status: str
    next_status: Optional[OrderStatus] = None
    action_description: Optional[str] = None
    next_status_message: Optional[str] = None


class NextStatusResponse(BaseModel):
    message: str
    data: NextStatusOut
