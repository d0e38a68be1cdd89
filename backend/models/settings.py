# backend/models/settings.py
from sqlalchemy import Column, Integer, String, Float, DateTime
from database import Base
from utils.timeutils import utcnow

# Single-row store configuration (receipt header, tax, currency)
class StoreSetting(Base):
    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True, index=True)
    store_name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    tax_percentage = Column(Float, nullable=False, default=0.0)
    receipt_footer = Column(String, nullable=True)
    currency = Column(String, nullable=False, default="IDR")
    low_stock_threshold_default = Column(Integer, nullable=False, default=5)

    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
