# app/models/invoice_models.py
import enum
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, ForeignKey, Numeric, DateTime, Enum, JSON, UniqueConstraint, func
)
from app.core.db import Base

class InvoiceStatus(str, enum.Enum):
    PENDING = "Pending"
    ISSUED = "Issued"
    OVERDUE = "Overdue"
    SETTLED = "Settled"

# Sentinel vendor for line items whose vendor cannot be resolved
DEFAULT_VENDOR_ID = "default-vendor"
UNKNOWN_VENDOR_NAME = "Unknown Vendor"


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("order_id", "vendor_id", name="uq_invoice_order_vendor"),
    )

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(32), unique=True, nullable=False, index=True)

    # weak back-reference, orders know nothing about their invoices
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    vendor_id = Column(String(64), nullable=False, index=True)
    vendor_name = Column(String(255), nullable=False, default=UNKNOWN_VENDOR_NAME)

    items = Column(JSON, nullable=False, default=list)
    customer = Column(JSON, nullable=False, default=dict)

    total_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    commission_percentage = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    commission_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    status = Column(
        Enum(InvoiceStatus, name="invoice_status", values_callable=lambda e: [m.value for m in e]),
        default=InvoiceStatus.ISSUED,
        nullable=False,
    )
    issued_date = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    settled_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    @property
    def commission(self) -> dict:
        return {"percentage": self.commission_percentage, "amount": self.commission_amount}

    def __repr__(self):
        return f"<Invoice(id={self.id}, invoice_number='{self.invoice_number}', vendor='{self.vendor_name}')>"
