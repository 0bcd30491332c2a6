"""
Tests for per-vendor invoice generation and invoice updates
"""
import asyncio
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.core.db import AsyncSessionLocal
from app.models.invoice_models import Invoice, InvoiceStatus, DEFAULT_VENDOR_ID, UNKNOWN_VENDOR_NAME
from app.models.order_models import Order, OrderStatus
from app.models.user_models import User
from app.schemas.order_schemas import OrderSnapshot
from app.services.invoice_service import (
    compute_commission,
    compute_due_date,
    generate_invoices_for_order,
    generate_invoices_for_order_id,
    get_invoice,
    list_invoices,
    mark_invoice_settled,
    update_invoice_status,
)
from app.utils.errors import NotFoundError, ValidationFailure
from tests.factories import CUSTOMER, create_order, create_vendor, in_session, product_line

ISSUED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _generate(order_id, now=ISSUED_AT):
    async def scenario():
        async with AsyncSessionLocal() as db:
            order = await db.get(Order, order_id)
            return await generate_invoices_for_order(db, OrderSnapshot.model_validate(order), now=now)
    return asyncio.run(scenario())


def _invoice_count():
    async def count(db):
        return (await db.execute(select(func.count(Invoice.id)))).scalar()
    return in_session(count)


class TestAmounts:
    """Commission and due date arithmetic"""

    def test_commission_is_ten_percent(self):
        assert compute_commission(Decimal("100000")) == Decimal("10000.00")

    def test_commission_rounds_half_up(self):
        assert compute_commission(Decimal("12345")) == Decimal("1234.50")
        assert compute_commission(Decimal("0.05")) == Decimal("0.01")

    def test_due_date_is_thirty_days_later(self):
        assert compute_due_date(ISSUED_AT) == datetime(2024, 1, 31, tzinfo=timezone.utc)


class TestGenerateInvoices:
    """Splitting an order into vendor invoices"""

    def test_two_vendor_order_produces_two_invoices(self):
        lines = [
            product_line(1, 11, "Nasi Goreng", 10000, 2, vendor_id=1, vendor_name="Dapur A"),
            product_line(2, 12, "Ayam Bakar", 50000, 1, vendor_id=2, vendor_name="Dapur B"),
        ]
        order_id = in_session(lambda db: create_order(db, lines))

        invoices = _generate(order_id)
        by_vendor = {i.vendor_name: i for i in invoices}

        assert len(invoices) == 2
        a, b = by_vendor["Dapur A"], by_vendor["Dapur B"]

        assert a.vendor_id == "1"
        assert a.total_amount == Decimal("20000.00")
        assert a.commission.percentage == Decimal("10.00")
        assert a.commission.amount == Decimal("2000.00")
        assert len(a.items) == 1
        assert a.items[0].product_name == "Nasi Goreng"
        assert a.items[0].quantity == 2
        assert a.items[0].unit_price == Decimal("10000.00")
        assert a.items[0].total_price == Decimal("20000.00")

        assert b.vendor_id == "2"
        assert b.total_amount == Decimal("50000.00")
        assert b.commission.amount == Decimal("5000.00")

        for invoice in invoices:
            assert invoice.order_id == order_id
            assert invoice.status == InvoiceStatus.ISSUED
            assert invoice.issued_date == ISSUED_AT
            assert invoice.due_date == datetime(2024, 1, 31, tzinfo=timezone.utc)
            assert invoice.settled_date is None
            assert invoice.customer.name == CUSTOMER["name"]
            assert invoice.customer.phone_number == CUSTOMER["phone_number"]
            assert re.fullmatch(r"INV-20240101-[0-9A-Z]{4}", invoice.invoice_number)

    def test_lines_of_one_vendor_share_an_invoice(self):
        lines = [
            product_line(1, 11, "Nasi Goreng", 10000, 2, vendor_id=1, vendor_name="Dapur A"),
            product_line(2, 13, "Es Teh", 3000, 3, vendor_id=1, vendor_name="Dapur A"),
        ]
        order_id = in_session(lambda db: create_order(db, lines))

        invoices = _generate(order_id)

        assert len(invoices) == 1
        assert invoices[0].total_amount == Decimal("29000.00")
        assert invoices[0].commission.amount == Decimal("2900.00")
        assert [item.product_name for item in invoices[0].items] == ["Nasi Goreng", "Es Teh"]

    def test_total_is_sum_of_item_totals(self):
        lines = [
            product_line(1, 11, "Kue", "2500.50", 3, vendor_id=1, vendor_name="Dapur A"),
            product_line(2, 12, "Roti", "1000.25", 4, vendor_id=1, vendor_name="Dapur A"),
        ]
        order_id = in_session(lambda db: create_order(db, lines))

        invoice = _generate(order_id)[0]
        assert invoice.total_amount == sum(item.total_price for item in invoice.items)
        assert invoice.total_amount == Decimal("11502.50")

    def test_regeneration_never_duplicates(self):
        lines = [
            product_line(1, 11, "Nasi Goreng", 10000, 2, vendor_id=1, vendor_name="Dapur A"),
            product_line(2, 12, "Ayam Bakar", 50000, 1, vendor_id=2, vendor_name="Dapur B"),
        ]
        order_id = in_session(lambda db: create_order(db, lines))

        assert len(_generate(order_id)) == 2
        assert _generate(order_id) == []
        assert _invoice_count() == 2

    def test_line_without_vendor_goes_to_default_vendor(self):
        lines = [product_line(1, 11, "Air Mineral", 4000, 1)]
        order_id = in_session(lambda db: create_order(db, lines))

        invoice = _generate(order_id)[0]
        assert invoice.vendor_id == DEFAULT_VENDOR_ID
        assert invoice.vendor_name == UNKNOWN_VENDOR_NAME

    def test_vendor_name_from_order_vendor_list(self):
        lines = [product_line(1, 11, "Soto", 15000, 1, vendor_id=7)]
        order_id = in_session(
            lambda db: create_order(db, lines, vendors=[{"id": 7, "name": "Warung Soto"}])
        )

        invoice = _generate(order_id)[0]
        assert invoice.vendor_id == "7"
        assert invoice.vendor_name == "Warung Soto"

    def test_vendor_name_from_registry(self):
        vendor_id = in_session(lambda db: create_vendor(db, "Dapur Registry"))
        lines = [product_line(1, 11, "Bakso", 12000, 1, vendor_id=vendor_id)]
        order_id = in_session(lambda db: create_order(db, lines))

        invoice = _generate(order_id)[0]
        assert invoice.vendor_id == str(vendor_id)
        assert invoice.vendor_name == "Dapur Registry"

    def test_unregistered_vendor_gets_unknown_name(self):
        lines = [product_line(1, 11, "Bakso", 12000, 1, vendor_id=404)]
        order_id = in_session(lambda db: create_order(db, lines))

        invoice = _generate(order_id)[0]
        assert invoice.vendor_id == "404"
        assert invoice.vendor_name == UNKNOWN_VENDOR_NAME

    def test_partially_invoiced_order_only_gets_missing_vendors(self):
        lines = [
            product_line(1, 11, "Nasi Goreng", 10000, 2, vendor_id=1, vendor_name="Dapur A"),
        ]
        order_id = in_session(lambda db: create_order(db, lines))
        _generate(order_id)

        async def add_line(db):
            order = await db.get(Order, order_id)
            order.product_orders = lines + [
                product_line(2, 12, "Ayam Bakar", 50000, 1, vendor_id=2, vendor_name="Dapur B")
            ]
            await db.commit()
        in_session(add_line)

        added = _generate(order_id)
        assert [i.vendor_name for i in added] == ["Dapur B"]
        assert _invoice_count() == 2


class TestManualGeneration:
    """Admin-triggered regeneration"""

    def test_rejects_orders_before_invoice_issued(self):
        order_id = in_session(lambda db: create_order(db, [product_line(1, 11, "Soto", 15000, 1)]))

        with pytest.raises(ValidationFailure):
            in_session(lambda db: generate_invoices_for_order_id(db, order_id))

    def test_missing_order(self):
        with pytest.raises(NotFoundError):
            in_session(lambda db: generate_invoices_for_order_id(db, 999))

    def test_fills_in_invoices_and_logs_activity(self, admin_id):
        lines = [product_line(1, 11, "Soto", 15000, 1, vendor_id=3, vendor_name="Warung Soto")]
        order_id = in_session(
            lambda db: create_order(db, lines, status=OrderStatus.INVOICE_ISSUED)
        )

        async def scenario(db):
            user = await db.get(User, admin_id)
            return await generate_invoices_for_order_id(db, order_id, user)

        invoices = in_session(scenario)
        assert len(invoices) == 1
        assert invoices[0].vendor_name == "Warung Soto"


class TestInvoiceUpdates:
    """Settling and status changes"""

    def _issued_invoice(self):
        lines = [product_line(1, 11, "Nasi Goreng", 10000, 2, vendor_id=1, vendor_name="Dapur A")]
        order_id = in_session(lambda db: create_order(db, lines))
        return _generate(order_id)[0]

    def test_settle_changes_only_status_and_settled_date(self):
        before = self._issued_invoice()
        settled_at = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)

        after = in_session(lambda db: mark_invoice_settled(db, before.id, settled_at))

        assert after.status == InvoiceStatus.SETTLED
        assert after.settled_date == settled_at
        unchanged = {"status", "settled_date", "updated_at", "is_overdue"}
        assert after.model_dump(exclude=unchanged) == before.model_dump(exclude=unchanged)

    def test_settle_defaults_to_now(self):
        invoice = self._issued_invoice()
        before = datetime.now(timezone.utc) - timedelta(seconds=5)

        settled = in_session(lambda db: mark_invoice_settled(db, invoice.id))
        assert settled.settled_date >= before

    def test_settled_invoice_is_never_overdue(self):
        invoice = self._issued_invoice()
        # issued in 2024, long past due
        assert invoice.is_overdue is True

        settled = in_session(lambda db: mark_invoice_settled(db, invoice.id))
        assert settled.is_overdue is False

    def test_generic_status_update(self):
        invoice = self._issued_invoice()

        pending = in_session(lambda db: update_invoice_status(db, invoice.id, InvoiceStatus.PENDING))
        assert pending.status == InvoiceStatus.PENDING
        assert pending.settled_date is None

    def test_leaving_settled_clears_settled_date(self):
        invoice = self._issued_invoice()
        in_session(lambda db: mark_invoice_settled(db, invoice.id))

        reopened = in_session(lambda db: update_invoice_status(db, invoice.id, InvoiceStatus.ISSUED))
        assert reopened.status == InvoiceStatus.ISSUED
        assert reopened.settled_date is None
        assert reopened.is_overdue is True

    def test_missing_invoice(self):
        with pytest.raises(NotFoundError):
            in_session(lambda db: get_invoice(db, 12345))

    def test_listing_by_vendor_and_order(self):
        lines = [
            product_line(1, 11, "Nasi Goreng", 10000, 2, vendor_id=1, vendor_name="Dapur A"),
            product_line(2, 12, "Ayam Bakar", 50000, 1, vendor_id=2, vendor_name="Dapur B"),
        ]
        first = in_session(lambda db: create_order(db, lines))
        second = in_session(lambda db: create_order(db, lines[:1]))
        _generate(first)
        _generate(second)

        assert len(in_session(lambda db: list_invoices(db))) == 3
        assert len(in_session(lambda db: list_invoices(db, vendor_id="1"))) == 2
        assert len(in_session(lambda db: list_invoices(db, order_id=first))) == 2
        assert len(in_session(lambda db: list_invoices(db, order_id=second, vendor_id="2"))) == 0
