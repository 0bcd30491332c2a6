# app/models/product_models.py
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, DateTime, Table, func
from sqlalchemy.orm import relationship
from app.core.db import Base

product_categories = Table(
    "product_categories",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    vendor = relationship("Vendor", lazy="selectin")

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True, default="")
    image_url = Column(String, nullable=True, default="")

    # price_base is the vendor price, price is what the customer pays
    price_base = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    price = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    stock = Column(Integer, nullable=True)

    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    vendor = relationship("Vendor", lazy="selectin")
    categories = relationship("Category", secondary=product_categories, lazy="selectin")

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
