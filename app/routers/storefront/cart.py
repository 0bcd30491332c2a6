# app/routers/storefront/cart.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.cart_schemas import CartItemAdd, CartItemUpdate, CartResponse, CheckoutResponse
from app.schemas.order_schemas import CheckoutRequest
from app.services.cart_service import CartService, get_cart, open_cart
from app.services.order_service import checkout
from app.services.product_service import get_product_model

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartResponse)
async def view_cart(cart: CartService = Depends(get_cart)):
    return {"message": "Cart fetched successfully", "data": cart.to_out()}


@router.post("/items", response_model=CartResponse)
async def add_to_cart(data: CartItemAdd, db: AsyncSession = Depends(get_db), cart: CartService = Depends(open_cart)):
    product = await get_product_model(db, data.product_id)
    item = cart.add(product, data.quantity)
    return {"message": f"'{item.name}' added to cart", "data": cart.to_out()}


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(product_id: int, data: CartItemUpdate, cart: CartService = Depends(get_cart)):
    cart.set_quantity(product_id, data.quantity)
    return {"message": "Cart updated", "data": cart.to_out()}


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: int, cart: CartService = Depends(get_cart)):
    cart.remove(product_id)
    return {"message": "Item removed from cart", "data": cart.to_out()}


@router.delete("", response_model=CartResponse)
async def clear_cart(cart: CartService = Depends(get_cart)):
    cart.clear()
    return {"message": "Cart cleared", "data": cart.to_out()}


@router.post("/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
async def checkout_cart(
    data: CheckoutRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    cart: CartService = Depends(get_cart),
):
    """
    Turn the cart into an order and return the WhatsApp message the customer
    sends to the admin to confirm it.
    """
    result = await checkout(db, cart, data.orderer, data.store_name)
    request.app.state.carts.discard(cart.session_id)
    return {"message": f"Order {result.order.order_number} created", "data": result}
