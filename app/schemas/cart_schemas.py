# app/schemas/cart_schemas.py
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional

from app.schemas.order_schemas import OrderOut


class CartItem(BaseModel):
    product_id: int
    name: str
    image_url: str = ""
    price_base: Decimal = Decimal("0")
    price: Decimal
    vendor_id: Optional[int] = None
    quantity: int = Field(..., ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class CartItemAdd(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=0)


class CartOut(BaseModel):
    session_id: str
    items: List[CartItem] = []
    total_quantity: int = 0
    total_price: Decimal = Decimal("0")


class CartResponse(BaseModel):
    message: str
    data: CartOut


class CheckoutOut(BaseModel):
    order: OrderOut
    message_text: str
    whatsapp_url: Optional[str] = None


class CheckoutResponse(BaseModel):
    message: str
    data: CheckoutOut
