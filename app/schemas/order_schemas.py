# app/schemas/order_schemas.py
"""
Typed views over the order document.

The JSON columns on ``Order`` (customer, product_orders, vendors, activities) are
snapshots written at checkout, so every field here carries an explicit default:
decoding an older or partial document never fails and never needs ad hoc
fallbacks at the call site.
"""
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional

from app.models.order_models import OrderStatus
from app.schemas.response_schemas import UTCDateTime
from app.utils.date_utils import utcnow


# =====================================================
# Nested document parts
# =====================================================
class CustomerInfo(BaseModel):
    name: str = ""
    phone_number: str = ""
    nama_santri: str = ""
    kelas: str = ""
    notes: str = ""


class VendorRef(BaseModel):
    id: Optional[int] = None
    name: str = ""


class ProductSnapshot(BaseModel):
    id: Optional[int] = None
    name: str = ""
    image_url: str = ""
    price_base: Decimal = Decimal("0")
    price: Decimal = Decimal("0")
    vendor_id: Optional[int] = None
    vendor: Optional[VendorRef] = None


class ProductOrder(BaseModel):
    id: int = 0
    product_id: Optional[int] = None
    quantity: int = 0
    product: ProductSnapshot = Field(default_factory=ProductSnapshot)


class OrderActivity(BaseModel):
    user_id: Optional[int] = None
    user_email: str = ""
    user_name: str = ""
    action: str = ""
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    notes: str = ""
    timestamp: UTCDateTime = Field(default_factory=utcnow)


# =====================================================
# Order views
# =====================================================
class OrderOut(BaseModel):
    id: int
    order_number: str
    status: OrderStatus
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    product_orders: List[ProductOrder] = []
    vendors: List[VendorRef] = []
    activities: List[OrderActivity] = []
    total: Decimal = Decimal("0")
    store_name: Optional[str] = None
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = {"from_attributes": True}


class OrderSnapshot(BaseModel):
    """The parts of an order the invoice generator reads."""
    id: int
    product_orders: List[ProductOrder] = []
    vendors: List[VendorRef] = []
    customer: CustomerInfo = Field(default_factory=CustomerInfo)

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    message: str
    data: OrderOut


class OrderListResponse(BaseModel):
    message: str
    total: int
    data: List[OrderOut]


class OrderActivityListResponse(BaseModel):
    message: str
    data: List[OrderActivity]


class OrderReport(BaseModel):
    total_order_value: Decimal = Decimal("0")
    total_profit: Decimal = Decimal("0")
    total_product_quantity: int = 0
    unique_products_count: int = 0
    unique_buyers_count: int = 0


class OrderReportResponse(BaseModel):
    message: str
    data: OrderReport


# =====================================================
# Input / Request Schemas
# =====================================================
class OrdererInput(BaseModel):
    name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    nama_santri: str = ""
    kelas: str = ""
    notes: str = ""


class CheckoutRequest(BaseModel):
    orderer: OrdererInput
    store_name: Optional[str] = None


class StatusAdvanceRequest(BaseModel):
    notes: Optional[str] = None


class StatusChangeRequest(BaseModel):
    status: OrderStatus
    notes: Optional[str] = None
