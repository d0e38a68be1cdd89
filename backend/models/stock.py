from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
from utils.timeutils import utcnow
import enum


class AdjustmentType(str, enum.Enum):
    PURCHASE = "purchase"
    LOSS = "loss"
    CORRECTION = "correction"
    RETURN = "return"
    # Checkout decrements; never accepted from the manual adjustment endpoint
    SALE = "sale"


# Append-only stock audit entry with a before/after snapshot
class StockAdjustment(Base):
    __tablename__ = "stock_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), index=True, nullable=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), index=True, nullable=True)

    previous_stock = Column(Integer, nullable=False)
    adjustment_quantity = Column(Integer, nullable=False)
    new_stock = Column(Integer, CheckConstraint("new_stock >= 0"), nullable=False)

    adjustment_type = Column(String, nullable=False, index=True)
    notes = Column(String, nullable=True)

    # Display fields copied at write time so history survives renames
    product_name = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    supplier_name = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow, index=True)

    product = relationship("Product")
    user = relationship("User")
    supplier = relationship("Supplier")
    transaction = relationship("Transaction")

    __table_args__ = (
        CheckConstraint("new_stock = previous_stock + adjustment_quantity", name="ck_adjustment_balance"),
    )
