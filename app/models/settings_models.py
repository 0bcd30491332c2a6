# app/models/settings_models.py
from sqlalchemy import Column, Integer, String, DateTime, func
from app.core.db import Base

class AppSettings(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    admin_phone_number = Column(String(32), nullable=False, default="")
    app_name = Column(String(255), nullable=False)
    app_domain = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
