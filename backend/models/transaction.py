from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from database import Base
from utils.timeutils import utcnow
import enum


# Accepted tenders
class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    E_WALLET = "e-wallet"


# Lifecycle of a recorded sale
class TransactionStatus(str, enum.Enum):
    COMPLETED = "completed"
    VOIDED = "voided"


# A completed checkout. Amounts and lines are never edited after creation;
# voiding only flips the status (stock is restored through adjustments).
class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, nullable=False, index=True)

    cashier_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), index=True, nullable=True)
    customer_name = Column(String, nullable=True)

    subtotal = Column(Float, nullable=False)
    discount = Column(Float, nullable=False, default=0.0)
    tax = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False)

    payment_method = Column(String, nullable=False, index=True)
    amount_paid = Column(Float, nullable=True)
    change = Column(Float, nullable=True) # Cash only

    status = Column(String, nullable=False, default=TransactionStatus.COMPLETED.value, index=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow, index=True)
    voided_at = Column(DateTime, nullable=True)
    voided_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    items = relationship("TransactionItem", back_populates="transaction", cascade="all, delete-orphan", order_by="TransactionItem.id")
    cashier = relationship("User", foreign_keys=[cashier_id])
    customer = relationship("Customer")

    @property
    def cashier_name(self):
        return self.cashier.name if self.cashier else None

    @property
    def items_count(self) -> int:
        return sum(it.quantity for it in self.items)


# Snapshot of one cart line at checkout time
class TransactionItem(Base):
    __tablename__ = "transaction_items"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    product_name = Column(String, nullable=False)
    sku = Column(String, nullable=False)
    unit_price = Column(Float, nullable=False)
    unit_cost = Column(Float, nullable=False, default=0.0)
    quantity = Column(Integer, nullable=False)
    discount = Column(Float, nullable=False, default=0.0)
    line_total = Column(Float, nullable=False)

    transaction = relationship("Transaction", back_populates="items")
    product = relationship("Product")
