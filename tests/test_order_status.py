"""
Tests for the order status workflow
"""
import asyncio

import pytest

from app.core.db import AsyncSessionLocal
from app.models.activity_models import UserActivity
from app.models.invoice_models import Invoice
from app.models.order_models import Order, OrderStatus, ORDER_STATUS_FLOW
from app.models.user_models import User
from app.services.order_status_service import (
    advance_order_status,
    describe_next_status,
    get_action_description,
    get_next_status,
    get_status_message,
    request_status_change,
)
from app.services import invoice_service
from app.utils.errors import ConflictError, NoTransitionAvailable, NotFoundError, StoreFailure
from sqlalchemy import func, select
from tests.factories import create_order, create_user, create_vendor, in_session, product_line


def _two_vendor_lines():
    return [
        product_line(1, 1, "Nasi Goreng", 10000, 2, vendor_id=1, vendor_name="Dapur A"),
        product_line(2, 2, "Ayam Bakar", 50000, 1, vendor_id=2, vendor_name="Dapur B"),
    ]


class TestNextStatus:
    """Status flow lookups"""

    @pytest.mark.parametrize("index", range(len(ORDER_STATUS_FLOW) - 1))
    def test_successor_of_every_status_but_the_last(self, index):
        assert get_next_status(ORDER_STATUS_FLOW[index]) == ORDER_STATUS_FLOW[index + 1]

    def test_last_status_has_no_successor(self):
        assert get_next_status(OrderStatus.INVOICE_SETTLED) is None

    def test_accepts_plain_strings(self):
        assert get_next_status("Order Shipped") == OrderStatus.ORDER_DELIVERED

    @pytest.mark.parametrize("value", ["Cancelled", "", "payment pending", None])
    def test_unknown_status_has_no_successor(self, value):
        assert get_next_status(value) is None

    def test_action_descriptions(self):
        assert get_action_description(OrderStatus.PAYMENT_PENDING) == "Konfirmasi Pembayaran"
        assert get_action_description(OrderStatus.ORDER_DELIVERED) == "Terbitkan Invoice"
        assert get_action_description(OrderStatus.INVOICE_SETTLED) is None
        assert get_action_description("Cancelled") is None

    def test_status_messages(self):
        assert get_status_message(OrderStatus.PAYMENT_PENDING) == "Menunggu pembayaran"
        assert get_status_message("Invoice Settled") == "Invoice lunas"
        assert get_status_message("Cancelled") == "Cancelled"

    def test_describe_next_status(self):
        described = describe_next_status(OrderStatus.ORDER_SHIPPED)
        assert described.current_status == "Order Shipped"
        assert described.next_status == OrderStatus.ORDER_DELIVERED
        assert described.action_description == "Konfirmasi Diterima"
        assert described.next_status_message == "Pesanan diterima"


class TestAdvanceOrderStatus:
    """Moving orders forward"""

    def test_advance_appends_exactly_one_activity(self, admin_id):
        order_id = in_session(lambda db: create_order(db, _two_vendor_lines()))

        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                result = await advance_order_status(db, order_id, user, notes="sudah transfer")
                audit_rows = (await db.execute(select(func.count(UserActivity.id)))).scalar()
                return result, audit_rows

        result, audit_rows = asyncio.run(scenario())

        assert result.from_status == OrderStatus.PAYMENT_PENDING
        assert result.to_status == OrderStatus.PAYMENT_CONFIRMED
        assert result.order.status == OrderStatus.PAYMENT_CONFIRMED
        assert result.invoices == []
        assert len(result.order.activities) == 1

        activity = result.order.activities[0]
        assert activity.from_status == "Payment Pending"
        assert activity.to_status == "Payment Confirmed"
        assert activity.action == 'Order status updated from "Payment Pending" to "Payment Confirmed"'
        assert activity.user_id == admin_id
        assert activity.user_email == "admin@example.com"
        assert activity.user_name == "Admin"
        assert activity.notes == "sudah transfer"
        assert activity.timestamp.tzinfo is not None
        assert audit_rows == 1

    def test_each_advance_adds_one_activity(self, admin_id):
        order_id = in_session(lambda db: create_order(db, _two_vendor_lines()))

        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                counts = []
                for _ in range(3):
                    result = await advance_order_status(db, order_id, user)
                    counts.append(len(result.order.activities))
                return counts, result

        counts, result = asyncio.run(scenario())
        assert counts == [1, 2, 3]
        assert result.order.status == OrderStatus.ORDER_SHIPPED
        assert [a.to_status for a in result.order.activities] == [
            "Payment Confirmed", "Order Processing", "Order Shipped",
        ]

    def test_settled_order_cannot_advance(self, admin_id):
        order_id = in_session(
            lambda db: create_order(db, _two_vendor_lines(), status=OrderStatus.INVOICE_SETTLED)
        )

        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                with pytest.raises(NoTransitionAvailable):
                    await advance_order_status(db, order_id, user)

            async with AsyncSessionLocal() as db:
                order = await db.get(Order, order_id)
                return order.status, list(order.activities), order.version

        status, activities, version = asyncio.run(scenario())
        assert status == OrderStatus.INVOICE_SETTLED
        assert activities == []
        assert version == 1

    def test_missing_order(self, admin_id):
        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                await advance_order_status(db, 999, user)

        with pytest.raises(NotFoundError):
            asyncio.run(scenario())

    def test_reaching_invoice_issued_generates_invoices(self, admin_id):
        order_id = in_session(
            lambda db: create_order(db, _two_vendor_lines(), status=OrderStatus.ORDER_DELIVERED)
        )

        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                return await advance_order_status(db, order_id, user)

        result = asyncio.run(scenario())
        assert result.to_status == OrderStatus.INVOICE_ISSUED
        assert len(result.invoices) == 2
        assert {i.vendor_name for i in result.invoices} == {"Dapur A", "Dapur B"}
        assert all(i.order_id == order_id for i in result.invoices)

    def test_settling_order_does_not_generate_more_invoices(self, admin_id):
        order_id = in_session(
            lambda db: create_order(db, _two_vendor_lines(), status=OrderStatus.ORDER_DELIVERED)
        )

        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                await advance_order_status(db, order_id, user)
                settled = await advance_order_status(db, order_id, user)
                count = (await db.execute(select(func.count(Invoice.id)))).scalar()
                return settled, count

        settled, count = asyncio.run(scenario())
        assert settled.to_status == OrderStatus.INVOICE_SETTLED
        assert settled.invoices == []
        assert count == 2

    def test_concurrent_advance_is_rejected(self, admin_id):
        order_id = in_session(lambda db: create_order(db, _two_vendor_lines()))

        async def scenario():
            async with AsyncSessionLocal() as first, AsyncSessionLocal() as second:
                # first session holds the order at version 1
                await first.get(Order, order_id)
                first_user = await first.get(User, admin_id)
                second_user = await second.get(User, admin_id)

                await advance_order_status(second, order_id, second_user)
                with pytest.raises(ConflictError):
                    await advance_order_status(first, order_id, first_user)

            async with AsyncSessionLocal() as db:
                order = await db.get(Order, order_id)
                return order.status, len(order.activities)

        status, activity_count = asyncio.run(scenario())
        assert status == OrderStatus.PAYMENT_CONFIRMED
        assert activity_count == 1


class TestRequestStatusChange:
    """Quick status updates from the order list"""

    def test_next_status_is_accepted(self, admin_id):
        order_id = in_session(lambda db: create_order(db, _two_vendor_lines()))

        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                return await request_status_change(db, order_id, OrderStatus.PAYMENT_CONFIRMED, user)

        result = asyncio.run(scenario())
        assert result.order.status == OrderStatus.PAYMENT_CONFIRMED
        assert len(result.order.activities) == 1

    @pytest.mark.parametrize("target", [
        OrderStatus.ORDER_SHIPPED,
        OrderStatus.PAYMENT_PENDING,
        OrderStatus.INVOICE_SETTLED,
    ])
    def test_other_statuses_are_rejected(self, admin_id, target):
        order_id = in_session(lambda db: create_order(db, _two_vendor_lines()))

        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                with pytest.raises(NoTransitionAvailable):
                    await request_status_change(db, order_id, target, user)
            async with AsyncSessionLocal() as db:
                return (await db.get(Order, order_id)).status

        assert asyncio.run(scenario()) == OrderStatus.PAYMENT_PENDING


class TestInvoiceGenerationFailure:
    """A failed vendor invoice leaves the order issued and is filled in later"""

    def test_failure_keeps_status_and_earlier_invoices(self, client, admin_id, admin_headers, monkeypatch):
        order_id = in_session(
            lambda db: create_order(db, _two_vendor_lines(), status=OrderStatus.ORDER_DELIVERED)
        )
        real_build = invoice_service.build_invoice_items

        def fail_for_second_vendor(lines):
            if any(line.product.vendor_id == 2 for line in lines):
                raise StoreFailure("disk full")
            return real_build(lines)

        monkeypatch.setattr(invoice_service, "build_invoice_items", fail_for_second_vendor)

        async def scenario():
            async with AsyncSessionLocal() as db:
                user = await db.get(User, admin_id)
                with pytest.raises(StoreFailure):
                    await advance_order_status(db, order_id, user)

            async with AsyncSessionLocal() as db:
                order = await db.get(Order, order_id)
                vendors = (await db.execute(
                    select(Invoice.vendor_id).where(Invoice.order_id == order_id)
                )).scalars().all()
                return order.status, len(order.activities), vendors

        status, activity_count, vendors = asyncio.run(scenario())
        assert status == OrderStatus.INVOICE_ISSUED
        assert activity_count == 1
        assert vendors == ["1"]

        monkeypatch.undo()
        response = client.post(f"/admin/invoices/generate/{order_id}", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert [i["vendor_name"] for i in body["data"]] == ["Dapur B"]

        invoices = client.get(f"/admin/invoices/order/{order_id}", headers=admin_headers).json()["data"]
        assert sorted(i["vendor_id"] for i in invoices) == ["1", "2"]
