# app/services/order_status_service.py
"""
Order status workflow.

An order only ever moves one step forward along ``ORDER_STATUS_FLOW``. Each move
appends an activity entry to the order and, when the order reaches "Invoice
Issued", triggers per-vendor invoice generation. The status commit and the
invoice writes are separate: if generation fails the order keeps its new status
and invoices can be regenerated from the invoices endpoint.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.models.order_models import Order, OrderStatus, ORDER_STATUS_FLOW
from app.schemas.order_schemas import OrderActivity, OrderOut, OrderSnapshot
from app.schemas.order_status_schemas import NextStatusOut, OrderTransitionOut
from app.services.invoice_service import generate_invoices_for_order
from app.utils.activity_helpers import log_user_activity
from app.utils.date_utils import as_utc, utcnow
from app.utils.errors import ConflictError, NoTransitionAvailable, NotFoundError, StoreFailure

logger = logging.getLogger(__name__)


# Customer-facing text per status
STATUS_MESSAGES = {
    OrderStatus.PAYMENT_PENDING: "Menunggu pembayaran",
    OrderStatus.PAYMENT_CONFIRMED: "Pembayaran dikonfirmasi",
    OrderStatus.ORDER_PROCESSING: "Memproses pesanan",
    OrderStatus.ORDER_SHIPPED: "Pesanan dikirim",
    OrderStatus.ORDER_DELIVERED: "Pesanan diterima",
    OrderStatus.INVOICE_ISSUED: "Invoice diterbitkan",
    OrderStatus.INVOICE_SETTLED: "Invoice lunas",
}

# Admin button label for the action that leaves each status
ACTION_DESCRIPTIONS = {
    OrderStatus.PAYMENT_PENDING: "Konfirmasi Pembayaran",
    OrderStatus.PAYMENT_CONFIRMED: "Proses Pesanan",
    OrderStatus.ORDER_PROCESSING: "Kirim Pesanan",
    OrderStatus.ORDER_SHIPPED: "Konfirmasi Diterima",
    OrderStatus.ORDER_DELIVERED: "Terbitkan Invoice",
    OrderStatus.INVOICE_ISSUED: "Tandai Lunas",
}


def _coerce_status(status) -> Optional[OrderStatus]:
    try:
        return OrderStatus(status)
    except ValueError:
        return None


def get_next_status(current) -> Optional[OrderStatus]:
    """Next status in the flow, or None for the last status and for unknown values."""
    status = _coerce_status(current)
    if status is None:
        return None
    index = ORDER_STATUS_FLOW.index(status)
    if index == len(ORDER_STATUS_FLOW) - 1:
        return None
    return ORDER_STATUS_FLOW[index + 1]


def get_action_description(current) -> Optional[str]:
    status = _coerce_status(current)
    return ACTION_DESCRIPTIONS.get(status) if status else None


def get_status_message(status) -> str:
    coerced = _coerce_status(status)
    if coerced is None:
        return str(status)
    return STATUS_MESSAGES[coerced]


def describe_next_status(current) -> NextStatusOut:
    next_status = get_next_status(current)
    return NextStatusOut(
        current_status=str(getattr(current, "value", current)),
        next_status=next_status,
        action_description=get_action_description(current),
        next_status_message=get_status_message(next_status) if next_status else None,
    )


async def _get_order_model(db: AsyncSession, order_id: int) -> Order:
    order = await db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


async def advance_order_status(
    db: AsyncSession,
    order_id: int,
    current_user,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> OrderTransitionOut:
    order = await _get_order_model(db, order_id)
    from_status = OrderStatus(order.status)
    to_status = get_next_status(from_status)
    if to_status is None:
        raise NoTransitionAvailable(f'No status transition available from "{from_status.value}"')

    activity = OrderActivity(
        user_id=current_user.id,
        user_email=current_user.email or "",
        user_name=current_user.display_name,
        action=f'Order status updated from "{from_status.value}" to "{to_status.value}"',
        from_status=from_status.value,
        to_status=to_status.value,
        notes=notes or "",
        timestamp=as_utc(now) or utcnow(),
    )
    order.activities.append(activity.model_dump(mode="json"))
    order.status = to_status

    await log_user_activity(
        db,
        current_user,
        message=f"{current_user.role.capitalize()} moved order '{order.order_number}' "
                f"from {from_status.value} to {to_status.value}",
    )
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        raise ConflictError("Order was modified by another request, reload and try again")
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to update order status: {e}")

    await db.refresh(order)
    logger.info("Order %s moved from %s to %s", order.order_number, from_status.value, to_status.value)

    invoices = []
    if to_status == OrderStatus.INVOICE_ISSUED:
        snapshot = OrderSnapshot.model_validate(order)
        try:
            invoices = await generate_invoices_for_order(db, snapshot, now=now)
        except StoreFailure:
            logger.error(
                "Invoice generation failed for order %s; order stays %s",
                order.order_number, to_status.value,
            )
            raise
        # generation may have rolled the session back
        await db.refresh(order)

    return OrderTransitionOut(
        order=OrderOut.model_validate(order),
        from_status=from_status,
        to_status=to_status,
        invoices=invoices,
    )


async def request_status_change(
    db: AsyncSession,
    order_id: int,
    target_status: OrderStatus,
    current_user,
    notes: Optional[str] = None,
) -> OrderTransitionOut:
    """Quick update from the order list: only the immediate next status is accepted."""
    order = await _get_order_model(db, order_id)
    current = OrderStatus(order.status)
    expected = get_next_status(current)
    if expected is None or OrderStatus(target_status) != expected:
        allowed = f'"{expected.value}"' if expected else "none"
        raise NoTransitionAvailable(
            f'Cannot move order from "{current.value}" to "{OrderStatus(target_status).value}"; '
            f"next allowed status is {allowed}"
        )
    return await advance_order_status(db, order_id, current_user, notes=notes)


async def get_next_status_for_order(db: AsyncSession, order_id: int) -> NextStatusOut:
    order = await _get_order_model(db, order_id)
    return describe_next_status(OrderStatus(order.status))
