from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional
from datetime import datetime


class StoreSettingsUpdate(BaseModel):
    store_name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    tax_percentage: Optional[float] = Field(None, ge=0, le=100)
    receipt_footer: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=1, max_length=10)
    low_stock_threshold_default: Optional[int] = Field(None, ge=0)


class StoreSettingsOut(BaseModel):
    store_name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    tax_percentage: float
    receipt_footer: Optional[str] = None
    currency: str
    low_stock_threshold_default: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
