# services/checkout.py
"""Checkout and void.

``complete_transaction`` turns a cart into a :class:`Transaction`: stock is
decremented line by line through the stock ledger (type ``sale``), the
transaction and its line snapshots are recorded and the cart is cleared, all
in one database transaction. Any failure rolls back every staged change.
"""
import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.cart import Cart
from models.customer import Customer
from models.transaction import Transaction, TransactionItem, PaymentMethod, TransactionStatus
from models.stock import AdjustmentType
from models.users import User
from schemas.transaction import PaymentDetails
from services import pricing
from services.errors import (
    AuthenticationError, CheckoutError, ConflictError, InsufficientPaymentError, NotFoundError,
)
from services.stock import lock_product, record_adjustment
from services.store_settings import get_store_settings
from utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def next_invoice_number(db: Session) -> str:
    last = db.query(Transaction).order_by(Transaction.id.desc()).first()
    if last is None:
        return "INV-0001"
    try:
        last_number = int(last.invoice_number.split("-", 1)[1])
    except (IndexError, ValueError):
        last_number = last.id
    return f"INV-{last_number + 1:04d}"


def complete_transaction(
    db: Session,
    user: Optional[User],
    lines: Sequence,
    payment: PaymentDetails,
    cart: Optional[Cart] = None,
) -> Transaction:
    if user is None:
        raise AuthenticationError("User not authenticated")
    if not lines:
        raise CheckoutError("Cart is empty")
    for line in lines:
        amount = line.unit_price * line.quantity
        if (line.discount or 0) > amount:
            raise CheckoutError(
                "Discount exceeds line amount",
                errors={"product_id": line.product_id, "line_amount": amount, "discount": line.discount},
            )

    discount = payment.discount or 0.0
    subtotal = pricing.calculate_subtotal(lines)
    taxable = pricing.calculate_total(lines, discount)
    if taxable < 0:
        raise CheckoutError("Discount exceeds subtotal", errors={"subtotal": subtotal, "discount": discount})

    store = get_store_settings(db)
    tax = pricing.calculate_tax(taxable, store.tax_percentage)
    total = round(taxable + tax, 2)

    method = PaymentMethod(payment.payment_method).value
    change = None
    amount_paid = total
    if method == PaymentMethod.CASH.value:
        if payment.amount_paid is not None:
            amount_paid = payment.amount_paid
        if amount_paid < total:
            raise InsufficientPaymentError(
                "Insufficient payment amount", errors={"total": total, "amount_paid": amount_paid}
            )
        change = pricing.calculate_change(amount_paid, total)

    customer = None
    customer_name = payment.customer_name
    if payment.customer_id is not None:
        customer = db.query(Customer).filter(Customer.id == payment.customer_id).first()
        if customer is None:
            raise NotFoundError("Customer not found")
        customer_name = customer_name or customer.name

    invoice_number = next_invoice_number(db)
    transaction = Transaction(
        invoice_number=invoice_number,
        cashier_id=user.id,
        customer_id=customer.id if customer else None,
        customer_name=customer_name,
        subtotal=round(subtotal, 2),
        discount=round(discount, 2),
        tax=tax,
        total=total,
        payment_method=method,
        amount_paid=round(amount_paid, 2),
        change=change,
        status=TransactionStatus.COMPLETED.value,
        notes=payment.notes,
    )

    try:
        # Stock leaves the shelf before the sale is recorded
        items: List[TransactionItem] = []
        for line in lines:
            product = lock_product(db, line.product_id)
            if product is None:
                raise NotFoundError(f"Product {line.product_id} not found")
            if not product.is_active:
                raise CheckoutError(f"Product {product.name} is not available for sale")
            if product.stock < line.quantity:
                raise CheckoutError(
                    f"Insufficient stock for product {product.name}. Available: {product.stock}",
                    errors={"product_id": product.id, "available": product.stock, "requested": line.quantity},
                )
            record_adjustment(
                db, product, -line.quantity, AdjustmentType.SALE.value, user,
                notes=f"Sale {invoice_number}", transaction=transaction,
            )
            items.append(TransactionItem(
                product_id=product.id,
                product_name=product.name,
                sku=product.sku,
                unit_price=line.unit_price,
                unit_cost=product.cost or 0.0,
                quantity=line.quantity,
                discount=line.discount or 0.0,
                line_total=round(pricing.line_total(line), 2),
            ))

        transaction.items = items
        db.add(transaction)

        if cart is not None:
            cart.items.clear()

        db.commit()
    except IntegrityError:
        # Another checkout took the same invoice number first
        logger.warning("invoice %s already taken, checkout by user=%s rejected", invoice_number, user.id)
        db.rollback()
        raise ConflictError(
            "Another sale was recorded at the same time, please retry",
            errors={"invoice_number": invoice_number},
        )
    except Exception:
        db.rollback()
        raise

    db.refresh(transaction)
    logger.info(
        "transaction %s completed by user=%s total=%s method=%s lines=%d",
        transaction.invoice_number, user.id, transaction.total, method, len(items),
    )
    return transaction


def void_transaction(db: Session, transaction_id: int, user: User, reason: Optional[str] = None) -> Transaction:
    """Mark a completed transaction voided and put its lines back on the shelf."""
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if transaction is None:
        raise NotFoundError("Transaction not found")
    if transaction.status == TransactionStatus.VOIDED.value:
        raise CheckoutError("Transaction is already voided")

    try:
        for item in transaction.items:
            product = lock_product(db, item.product_id)
            if product is None:
                raise NotFoundError(f"Product {item.product_id} not found")
            note = f"Void {transaction.invoice_number}"
            if reason:
                note = f"{note}: {reason}"
            record_adjustment(
                db, product, item.quantity, AdjustmentType.CORRECTION.value, user,
                notes=note, transaction=transaction,
            )

        transaction.status = TransactionStatus.VOIDED.value
        transaction.voided_at = utcnow()
        transaction.voided_by = user.id
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(transaction)
    logger.info("transaction %s voided by user=%s", transaction.invoice_number, user.id)
    return transaction
