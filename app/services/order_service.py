# app/services/order_service.py
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import APP_DOMAIN, DEFAULT_STORE_NAME
from app.models.order_models import Order, OrderStatus
from app.models.product_models import Product
from app.schemas.cart_schemas import CheckoutOut
from app.schemas.order_schemas import (
    CustomerInfo, OrderActivity, OrdererInput, OrderOut, OrderReport,
    ProductOrder, ProductSnapshot, VendorRef,
)
from app.services.cart_service import CartService
from app.services.settings_service import get_latest_settings
from app.utils.date_utils import TimeFrame, start_of_time_frame
from app.utils.decimal_utils import to_decimal
from app.utils.errors import NotFoundError, StoreFailure, ValidationFailure
from app.utils.numbering import MAX_NUMBER_ATTEMPTS, generate_order_number
from app.utils.order_text import build_whatsapp_url, generate_order_text

logger = logging.getLogger(__name__)


# ---------------------------
# CHECKOUT
# ---------------------------
async def _snapshot_cart(db: AsyncSession, cart: CartService):
    items = cart.items()
    product_ids = [item.product_id for item in items]
    result = await db.execute(select(Product).where(Product.id.in_(product_ids)))
    products = {p.id: p for p in result.scalars().all()}

    product_orders: List[ProductOrder] = []
    vendors: Dict[int, VendorRef] = {}
    for index, item in enumerate(items, start=1):
        product = products.get(item.product_id)
        if product is None:
            raise NotFoundError(f"Product {item.product_id} no longer exists")

        vendor_ref = None
        if product.vendor is not None:
            vendor_ref = VendorRef(id=product.vendor.id, name=product.vendor.name)
            vendors.setdefault(vendor_ref.id, vendor_ref)

        product_orders.append(ProductOrder(
            id=index,
            product_id=product.id,
            quantity=item.quantity,
            product=ProductSnapshot(
                id=product.id,
                name=product.name,
                image_url=product.image_url or "",
                price_base=to_decimal(product.price_base),
                price=to_decimal(product.price),
                vendor_id=product.vendor_id,
                vendor=vendor_ref,
            ),
        ))
    return product_orders, list(vendors.values())


async def checkout(
    db: AsyncSession,
    cart: CartService,
    orderer: OrdererInput,
    store_name: Optional[str] = None,
) -> CheckoutOut:
    if cart.is_empty():
        raise ValidationFailure("Cart is empty")

    product_orders, vendors = await _snapshot_cart(db, cart)
    customer = CustomerInfo(**orderer.model_dump())
    total = to_decimal(sum((line.product.price * line.quantity for line in product_orders), Decimal("0")))

    # try generating unique order number
    order = None
    for _ in range(MAX_NUMBER_ATTEMPTS):
        order = Order(
            order_number=generate_order_number(),
            status=OrderStatus.PAYMENT_PENDING,
            customer=customer.model_dump(mode="json"),
            product_orders=[line.model_dump(mode="json") for line in product_orders],
            vendors=[v.model_dump(mode="json") for v in vendors],
            store_name=store_name or DEFAULT_STORE_NAME,
            total=total,
            activities=[],
        )
        db.add(order)
        try:
            await db.commit()
            break
        except IntegrityError:
            await db.rollback()
            order = None
        except SQLAlchemyError as e:
            await db.rollback()
            raise StoreFailure(f"Failed to create order: {e}")
    if order is None:
        raise StoreFailure("Could not generate unique order number after retries")

    await db.refresh(order)
    logger.info("Order %s created with %d line(s), total %s", order.order_number, len(product_orders), total)

    settings = await get_latest_settings(db)
    app_domain = settings.app_domain if settings and settings.app_domain else APP_DOMAIN
    message_text = generate_order_text(product_orders, customer, total, order.order_number, app_domain)
    whatsapp_url = build_whatsapp_url(settings.admin_phone_number if settings else None, message_text)

    cart.clear()
    return CheckoutOut(
        order=OrderOut.model_validate(order),
        message_text=message_text,
        whatsapp_url=whatsapp_url,
    )


# ---------------------------
# QUERIES
# ---------------------------
async def get_order(db: AsyncSession, order_id: int) -> OrderOut:
    order = await db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return OrderOut.model_validate(order)


async def get_order_by_number(db: AsyncSession, order_number: str) -> OrderOut:
    result = await db.execute(select(Order).where(Order.order_number == order_number))
    order = result.scalars().first()
    if not order:
        raise NotFoundError(f"Order {order_number} not found")
    return OrderOut.model_validate(order)


async def list_orders(
    db: AsyncSession,
    status: Optional[OrderStatus] = None,
    time_frame: Optional[TimeFrame] = None,
) -> List[OrderOut]:
    stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
    if status is not None:
        stmt = stmt.where(Order.status == status)
    if time_frame is not None:
        stmt = stmt.where(Order.created_at >= start_of_time_frame(time_frame))

    try:
        orders = (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as e:
        raise StoreFailure(f"Failed to fetch orders: {e}")
    return [OrderOut.model_validate(o) for o in orders]


async def get_order_activities(db: AsyncSession, order_id: int) -> List[OrderActivity]:
    order = await get_order(db, order_id)
    return sorted(order.activities, key=lambda a: a.timestamp, reverse=True)


# ---------------------------
# REPORTS
# ---------------------------
def generate_reports(orders: List[OrderOut]) -> OrderReport:
    total_order_value = Decimal("0")
    total_profit = Decimal("0")
    total_quantity = 0
    products = set()
    buyers = set()

    for order in orders:
        total_order_value += to_decimal(order.total)
        if order.customer.phone_number:
            buyers.add(order.customer.phone_number)
        for line in order.product_orders:
            margin = to_decimal(line.product.price) - to_decimal(line.product.price_base)
            total_profit += margin * line.quantity
            total_quantity += line.quantity
            products.add(line.product_id if line.product_id is not None else line.product.name)

    return OrderReport(
        total_order_value=to_decimal(total_order_value),
        total_profit=to_decimal(total_profit),
        total_product_quantity=total_quantity,
        unique_products_count=len(products),
        unique_buyers_count=len(buyers),
    )


async def get_order_report(
    db: AsyncSession,
    status: Optional[OrderStatus] = None,
    time_frame: Optional[TimeFrame] = None,
) -> OrderReport:
    return generate_reports(await list_orders(db, status=status, time_frame=time_frame))
