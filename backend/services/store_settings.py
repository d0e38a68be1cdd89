# services/store_settings.py
from sqlalchemy.orm import Session

from config import settings
from models.settings import StoreSetting


def default_values() -> dict:
    return {
        "store_name": settings.STORE_NAME,
        "address": None,
        "phone": None,
        "email": None,
        "tax_percentage": settings.DEFAULT_TAX_PERCENTAGE,
        "receipt_footer": settings.RECEIPT_FOOTER,
        "currency": settings.DEFAULT_CURRENCY,
        "low_stock_threshold_default": settings.DEFAULT_LOW_STOCK_THRESHOLD,
    }


def get_store_settings(db: Session) -> StoreSetting:
    """Return the settings row, creating it from config defaults on first use."""
    row = db.query(StoreSetting).order_by(StoreSetting.id.asc()).first()
    if row is None:
        row = StoreSetting(**default_values())
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def reset_store_settings(db: Session) -> StoreSetting:
    row = get_store_settings(db)
    for key, value in default_values().items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row
