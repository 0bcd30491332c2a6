# app/models/schedule_models.py
from sqlalchemy import Column, Integer, Date, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from app.core.db import Base

class Schedule(Base):
    """A product offered on a given calendar day."""
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    product = relationship("Product", lazy="selectin")
