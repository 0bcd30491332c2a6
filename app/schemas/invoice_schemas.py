# app/schemas/invoice_schemas.py
from decimal import Decimal
from pydantic import BaseModel, Field, computed_field
from typing import List, Optional

from app.models.invoice_models import InvoiceStatus
from app.schemas.order_schemas import CustomerInfo
from app.schemas.response_schemas import UTCDateTime
from app.utils.date_utils import utcnow


class InvoiceItem(BaseModel):
    product_id: Optional[int] = None
    product_name: str = ""
    quantity: int = 0
    unit_price: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")


class Commission(BaseModel):
    percentage: Decimal
    amount: Decimal


class InvoiceOut(BaseModel):
    id: int
    invoice_number: str
    order_id: Optional[int] = None
    vendor_id: str
    vendor_name: str
    items: List[InvoiceItem] = []
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    total_amount: Decimal
    commission: Commission
    status: InvoiceStatus
    issued_date: UTCDateTime
    due_date: UTCDateTime
    settled_date: Optional[UTCDateTime] = None
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def is_overdue(self) -> bool:
        # never persisted; derived from the due date on every read
        return self.status != InvoiceStatus.SETTLED and self.due_date < utcnow()


class InvoiceResponse(BaseModel):
    message: str
    data: InvoiceOut


class InvoiceListResponse(BaseModel):
    message: str
    total: int
    data: List[InvoiceOut]


class InvoiceSettle(BaseModel):
    settled_date: Optional[UTCDateTime] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus
    settled_date: Optional[UTCDateTime] = None
