# backend/schemas/stock.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime, date
from typing import List, Optional, Literal

# Types accepted from the manual adjustment endpoint ("sale" is checkout only)
ManualAdjustmentType = Literal["purchase", "loss", "correction", "return"]

# Schema for creating a new stock adjustment
class StockAdjustmentCreate(BaseModel):
    product_id: int
    adjustment_quantity: int
    adjustment_type: ManualAdjustmentType
    supplier_id: Optional[int] = None
    notes: Optional[str] = None

# Schema for returning stock adjustment details
class StockAdjustmentOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    previous_stock: int
    adjustment_quantity: int
    new_stock: int
    adjustment_type: str
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = None
    transaction_id: Optional[int] = None
    notes: Optional[str] = None
    user_id: int
    user_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

# Adjustment counts for the current month
class MonthlyStockStats(BaseModel):
    month: str
    purchases: int
    losses: int
    returns: int
    corrections: int
    sales: int
    total: int

# Per-day net quantity by adjustment type
class StockMovementDay(BaseModel):
    date: date
    formatted_date: str
    purchase: int = 0
    loss: int = 0
    correction: int = 0
    sale: int = 0
    # "return" is a Python keyword
    return_: int = Field(default=0, alias="return", serialization_alias="return")

    model_config = ConfigDict(populate_by_name=True)
