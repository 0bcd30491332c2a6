# app/models/order_models.py
import enum
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, JSON, func
from sqlalchemy.ext.mutable import MutableList
from app.core.db import Base


class OrderStatus(str, enum.Enum):
    PAYMENT_PENDING = "Payment Pending"
    PAYMENT_CONFIRMED = "Payment Confirmed"
    ORDER_PROCESSING = "Order Processing"
    ORDER_SHIPPED = "Order Shipped"
    ORDER_DELIVERED = "Order Delivered"
    INVOICE_ISSUED = "Invoice Issued"
    INVOICE_SETTLED = "Invoice Settled"


# Orders only ever move one step forward along this list
ORDER_STATUS_FLOW = [
    OrderStatus.PAYMENT_PENDING,
    OrderStatus.PAYMENT_CONFIRMED,
    OrderStatus.ORDER_PROCESSING,
    OrderStatus.ORDER_SHIPPED,
    OrderStatus.ORDER_DELIVERED,
    OrderStatus.INVOICE_ISSUED,
    OrderStatus.INVOICE_SETTLED,
]


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), unique=True, nullable=False, index=True)

    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=lambda e: [m.value for m in e]),
        default=OrderStatus.PAYMENT_PENDING,
        nullable=False,
        index=True,
    )

    # Snapshots taken at checkout
    customer = Column(JSON, nullable=False, default=dict)   # {"name", "phone_number", "nama_santri", "kelas", "notes"}
    product_orders = Column(JSON, nullable=False, default=list)
    vendors = Column(JSON, nullable=False, default=list)    # [{"id", "name"}]
    store_name = Column(String(255), nullable=True)
    total = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    # append-only audit trail of status changes
    activities = Column(MutableList.as_mutable(JSON), nullable=False, default=list)

    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', status='{self.status}')>"
