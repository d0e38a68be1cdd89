# services/stock.py
"""Stock ledger.

Every change to ``Product.stock`` goes through :func:`record_adjustment`,
which appends a :class:`StockAdjustment` holding the before/after snapshot.
``record_adjustment`` only stages rows on the session so callers can group
several adjustments into one database transaction (checkout, void);
:func:`update_stock` is the standalone, committing entry point.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from models.product import Product
from models.stock import StockAdjustment, AdjustmentType
from models.supplier import Supplier
from models.users import User
from services.errors import AuthenticationError, NotFoundError, StockAdjustmentError

logger = logging.getLogger(__name__)

ADJUSTMENT_TYPES = tuple(t.value for t in AdjustmentType)
MANUAL_ADJUSTMENT_TYPES = ("purchase", "loss", "correction", "return")


def validate_adjustment(previous_stock: int, quantity: int, adjustment_type: str) -> int:
    """Check a signed delta against the ledger rules and return the new stock."""
    if adjustment_type not in ADJUSTMENT_TYPES:
        raise StockAdjustmentError(f"Unknown adjustment type: {adjustment_type}")

    new_stock = previous_stock + quantity
    if new_stock < 0:
        raise StockAdjustmentError(
            "The adjustment would result in negative stock",
            errors={"current_stock": previous_stock, "adjustment": quantity, "result": new_stock},
        )

    if adjustment_type == AdjustmentType.PURCHASE.value and quantity <= 0:
        raise StockAdjustmentError("Purchase quantity must be positive")
    if adjustment_type in (AdjustmentType.LOSS.value, AdjustmentType.RETURN.value) and quantity >= 0:
        raise StockAdjustmentError("Loss or return quantity must be negative")
    if adjustment_type == AdjustmentType.SALE.value and quantity >= 0:
        raise StockAdjustmentError("Sale quantity must be negative")

    return new_stock


def record_adjustment(
    db: Session,
    product: Product,
    quantity: int,
    adjustment_type: str,
    user: User,
    supplier: Optional[Supplier] = None,
    notes: Optional[str] = None,
    transaction=None,
) -> StockAdjustment:
    """Apply ``quantity`` to ``product.stock`` and stage the audit entry. Does not commit."""
    previous_stock = product.stock or 0
    new_stock = validate_adjustment(previous_stock, quantity, adjustment_type)

    product.stock = new_stock
    adjustment = StockAdjustment(
        product=product,
        previous_stock=previous_stock,
        adjustment_quantity=quantity,
        new_stock=new_stock,
        adjustment_type=adjustment_type,
        supplier=supplier,
        notes=notes,
        user_id=user.id,
        product_name=product.name,
        user_name=user.name,
        supplier_name=supplier.name if supplier else None,
        transaction=transaction,
    )
    db.add(adjustment)
    return adjustment


def lock_product(db: Session, product_id: int) -> Optional[Product]:
    # Row lock on backends that support it; SQLite ignores FOR UPDATE
    return db.query(Product).filter(Product.id == product_id).with_for_update().first()


def update_stock(
    db: Session,
    product_id: int,
    quantity: int,
    adjustment_type: str,
    user: Optional[User],
    supplier_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> StockAdjustment:
    """Adjust one product's stock and commit the adjustment record."""
    if user is None:
        raise AuthenticationError("User not authenticated")

    product = lock_product(db, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    supplier = None
    if supplier_id is not None:
        supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
        if supplier is None:
            raise StockAdjustmentError("Supplier not found", errors={"supplier_id": supplier_id})

    try:
        adjustment = record_adjustment(db, product, quantity, adjustment_type, user, supplier=supplier, notes=notes)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(adjustment)
    logger.info(
        "stock %s product=%s %s -> %s (%+d) by user=%s",
        adjustment_type, product.id, adjustment.previous_stock, adjustment.new_stock, quantity, user.id,
    )
    return adjustment
