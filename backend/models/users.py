# backend/models/users.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from database import Base
from utils.timeutils import utcnow

# Roles recognised by the role gate
ROLES = ("admin", "manager", "cashier")

# Represents a staff account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="cashier")
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
