# backend/models/customer.py
from sqlalchemy import Column, Integer, String, DateTime
from database import Base
from utils.timeutils import utcnow

# Represents a known buyer; transactions without one are walk-in sales
class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=True, index=True)
    email = Column(String, unique=True, nullable=True)
    address = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
