# app/services/invoice_service.py
"""
Invoice generation and invoice status updates.

Invoices are produced as a side effect of an order reaching "Invoice Issued":
the order's line items are split per vendor and each vendor gets one invoice
carrying the platform commission. Every vendor invoice is committed on its own,
so a failure part-way leaves the invoices already written in place; calling
``generate_invoices_for_order`` again only fills in the vendors still missing.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import COMMISSION_PERCENTAGE, INVOICE_DUE_DAYS
from app.models.invoice_models import Invoice, InvoiceStatus, DEFAULT_VENDOR_ID, UNKNOWN_VENDOR_NAME
from app.models.order_models import Order, OrderStatus, ORDER_STATUS_FLOW
from app.models.vendor_models import Vendor
from app.schemas.invoice_schemas import InvoiceItem, InvoiceOut
from app.schemas.order_schemas import OrderSnapshot, ProductOrder
from app.utils.activity_helpers import log_user_activity
from app.utils.date_utils import as_utc, utcnow
from app.utils.decimal_utils import percentage_of, to_decimal
from app.utils.errors import NotFoundError, StoreFailure, ValidationFailure
from app.utils.numbering import MAX_NUMBER_ATTEMPTS, generate_invoice_number

logger = logging.getLogger(__name__)


# --------------------------
# Helpers: amounts and dates
# --------------------------
def compute_commission(total_amount, percentage=COMMISSION_PERCENTAGE) -> Decimal:
    return percentage_of(total_amount, percentage)


def compute_due_date(issued_date: datetime, days: int = INVOICE_DUE_DAYS) -> datetime:
    return issued_date + timedelta(days=days)


def build_invoice_items(product_orders: List[ProductOrder]) -> List[InvoiceItem]:
    items = []
    for line in product_orders:
        unit_price = to_decimal(line.product.price)
        items.append(InvoiceItem(
            product_id=line.product_id if line.product_id is not None else line.product.id,
            product_name=line.product.name,
            quantity=line.quantity,
            unit_price=unit_price,
            total_price=to_decimal(unit_price * line.quantity),
        ))
    return items


# --------------------------
# Helpers: vendor resolution
# --------------------------
async def _lookup_vendor_name(db: AsyncSession, vendor_id: int) -> Optional[str]:
    # best effort: a failed lookup degrades to the unknown-vendor name
    try:
        vendor = await db.get(Vendor, vendor_id)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning("Could not fetch vendor %s: %s", vendor_id, e)
        return None
    if vendor and vendor.name:
        return vendor.name
    return None


async def resolve_vendor(
    db: AsyncSession,
    line: ProductOrder,
    order_vendors: Dict[int, str],
    lookup_cache: Dict[int, Optional[str]],
) -> Tuple[str, str]:
    """
    Work out which vendor a line item belongs to.

    Order of preference: the vendor embedded on the product snapshot, the
    order's own vendor list, the vendor registry, and finally the
    ``default-vendor`` sentinel.
    """
    product = line.product
    embedded = product.vendor
    vendor_id = embedded.id if embedded and embedded.id is not None else product.vendor_id
    if vendor_id is None:
        return DEFAULT_VENDOR_ID, UNKNOWN_VENDOR_NAME

    name = embedded.name if embedded and embedded.name and embedded.id in (None, vendor_id) else None
    if not name:
        name = order_vendors.get(vendor_id)
    if not name:
        if vendor_id not in lookup_cache:
            lookup_cache[vendor_id] = await _lookup_vendor_name(db, vendor_id)
        name = lookup_cache[vendor_id]

    return str(vendor_id), name or UNKNOWN_VENDOR_NAME


async def group_product_orders_by_vendor(db: AsyncSession, order: OrderSnapshot) -> List[dict]:
    """Partition line items per vendor, keeping first-appearance order."""
    order_vendors = {v.id: v.name for v in order.vendors if v.id is not None and v.name}
    lookup_cache: Dict[int, Optional[str]] = {}
    groups: Dict[str, dict] = {}

    for line in order.product_orders:
        vendor_id, vendor_name = await resolve_vendor(db, line, order_vendors, lookup_cache)
        group = groups.setdefault(vendor_id, {"vendor_id": vendor_id, "vendor_name": vendor_name, "lines": []})
        group["lines"].append(line)

    return list(groups.values())


# --------------------------
# Invoice generation
# --------------------------
async def _invoice_exists(db: AsyncSession, order_id: int, vendor_id: str) -> bool:
    result = await db.execute(
        select(Invoice.id).where(Invoice.order_id == order_id, Invoice.vendor_id == vendor_id)
    )
    return result.first() is not None


async def _create_vendor_invoice(
    db: AsyncSession,
    order: OrderSnapshot,
    vendor_id: str,
    vendor_name: str,
    items: List[InvoiceItem],
    issued_date: datetime,
) -> Optional[Invoice]:
    total_amount = to_decimal(sum((item.total_price for item in items), Decimal("0")))

    # try generating unique invoice number
    for _ in range(MAX_NUMBER_ATTEMPTS):
        invoice = Invoice(
            invoice_number=generate_invoice_number(issued_date),
            order_id=order.id,
            vendor_id=vendor_id,
            vendor_name=vendor_name,
            items=[item.model_dump(mode="json") for item in items],
            customer=order.customer.model_dump(mode="json"),
            total_amount=total_amount,
            commission_percentage=to_decimal(COMMISSION_PERCENTAGE),
            commission_amount=compute_commission(total_amount),
            status=InvoiceStatus.ISSUED,
            issued_date=issued_date,
            due_date=compute_due_date(issued_date),
        )
        db.add(invoice)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            if await _invoice_exists(db, order.id, vendor_id):
                logger.info("Invoice for order %s / vendor %s already exists, skipping", order.id, vendor_id)
                return None
            continue
        except SQLAlchemyError as e:
            await db.rollback()
            raise StoreFailure(f"Failed to create invoice for vendor '{vendor_name}': {e}")

        await db.refresh(invoice)
        logger.info(
            "Generated invoice %s for vendor '%s' (order %s), amount %s",
            invoice.invoice_number, vendor_name, order.id, total_amount,
        )
        return invoice

    raise StoreFailure("Could not generate unique invoice number after retries")


async def generate_invoices_for_order(
    db: AsyncSession,
    order: OrderSnapshot,
    now: Optional[datetime] = None,
) -> List[InvoiceOut]:
    """
    Create one invoice per vendor found in ``order``'s line items.

    Vendors that already hold an invoice for this order are skipped. Any write
    failure stops the loop and surfaces as ``StoreFailure``; invoices committed
    before the failure are kept.
    """
    issued_date = as_utc(now) or utcnow()
    groups = await group_product_orders_by_vendor(db, order)

    try:
        result = await db.execute(select(Invoice.vendor_id).where(Invoice.order_id == order.id))
        existing = set(result.scalars().all())
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to read invoices for order {order.id}: {e}")

    invoices: List[InvoiceOut] = []
    for group in groups:
        if group["vendor_id"] in existing:
            logger.info("Order %s already invoiced for vendor %s", order.id, group["vendor_id"])
            continue
        items = build_invoice_items(group["lines"])
        invoice = await _create_vendor_invoice(
            db, order, group["vendor_id"], group["vendor_name"], items, issued_date
        )
        if invoice is not None:
            invoices.append(InvoiceOut.model_validate(invoice))

    logger.info("Generated %d invoice(s) for order %s", len(invoices), order.id)
    return invoices


async def generate_invoices_for_order_id(db: AsyncSession, order_id: int, current_user=None) -> List[InvoiceOut]:
    """Manual (re)generation for an order already past "Invoice Issued"."""
    order = await db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")

    issued_index = ORDER_STATUS_FLOW.index(OrderStatus.INVOICE_ISSUED)
    if ORDER_STATUS_FLOW.index(OrderStatus(order.status)) < issued_index:
        raise ValidationFailure(
            f'Order {order.order_number} is "{OrderStatus(order.status).value}"; '
            f'invoices are generated from "{OrderStatus.INVOICE_ISSUED.value}" onwards'
        )

    snapshot = OrderSnapshot.model_validate(order)
    invoices = await generate_invoices_for_order(db, snapshot)

    if current_user and invoices:
        # a retried invoice number rolls the session back and expires the user
        await db.refresh(current_user)
        await log_user_activity(
            db,
            current_user,
            message=f"{current_user.role.capitalize()} generated {len(invoices)} invoice(s) for order '{snapshot.id}'",
            commit=True,
        )
    return invoices


# --------------------------
# Invoice status updates
# --------------------------
async def _get_invoice_model(db: AsyncSession, invoice_id: int) -> Invoice:
    invoice = await db.get(Invoice, invoice_id)
    if invoice is None:
        raise NotFoundError("Invoice not found")
    return invoice


async def update_invoice_status(
    db: AsyncSession,
    invoice_id: int,
    status: InvoiceStatus,
    settled_date: Optional[datetime] = None,
    current_user=None,
) -> InvoiceOut:
    invoice = await _get_invoice_model(db, invoice_id)
    previous = InvoiceStatus(invoice.status)

    invoice.status = status
    if status == InvoiceStatus.SETTLED:
        invoice.settled_date = as_utc(settled_date) or utcnow()
    else:
        invoice.settled_date = None

    await log_user_activity(
        db,
        current_user,
        message=f"Invoice '{invoice.invoice_number}' status updated from {previous.value} to {status.value}",
    )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreFailure(f"Failed to update invoice: {e}")

    await db.refresh(invoice)
    return InvoiceOut.model_validate(invoice)


async def mark_invoice_settled(
    db: AsyncSession,
    invoice_id: int,
    settled_date: Optional[datetime] = None,
    current_user=None,
) -> InvoiceOut:
    # any prior status may be forced to Settled
    return await update_invoice_status(db, invoice_id, InvoiceStatus.SETTLED, settled_date, current_user)


# --------------------------
# Queries
# --------------------------
async def get_invoice(db: AsyncSession, invoice_id: int) -> InvoiceOut:
    invoice = await _get_invoice_model(db, invoice_id)
    return InvoiceOut.model_validate(invoice)


async def list_invoices(
    db: AsyncSession,
    vendor_id: Optional[str] = None,
    order_id: Optional[int] = None,
    status: Optional[InvoiceStatus] = None,
) -> List[InvoiceOut]:
    stmt = select(Invoice).order_by(Invoice.created_at.desc(), Invoice.id.desc())
    if vendor_id is not None:
        stmt = stmt.where(Invoice.vendor_id == str(vendor_id))
    if order_id is not None:
        stmt = stmt.where(Invoice.order_id == order_id)
    if status is not None:
        stmt = stmt.where(Invoice.status == status)

    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        raise StoreFailure(f"Failed to fetch invoices: {e}")
    return [InvoiceOut.model_validate(i) for i in result.scalars().all()]
