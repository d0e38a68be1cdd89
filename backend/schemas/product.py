# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---- Categories ----
class CategoryCreate(ORMBase):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryUpdate(ORMBase):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryOut(CategoryCreate):
    id: int


# ---- Products ----
# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str = Field(min_length=1, max_length=100)
    sku: str = Field(min_length=1, max_length=50)
    barcode: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    price: float = Field(ge=0)
    cost: float = Field(default=0.0, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    is_active: bool = True
    image_url: Optional[str] = None


# Schema for creating a new product; stock here is the opening balance
class ProductCreate(ProductBase):
    stock: int = Field(default=0, ge=0)


# Schema for partial product updates
class ProductUpdate(ORMBase):
    """All fields optional. Stock is deliberately absent: use /stock/adjust."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    barcode: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    is_active: Optional[bool] = None
    image_url: Optional[str] = None


# Full product representation including ID
class ProductOut(ORMBase):
    id: int
    name: str
    sku: str
    barcode: Optional[str] = None
    description: Optional[str] = None
    price: float
    cost: float
    stock: int
    low_stock_threshold: int
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    is_active: bool
    is_low_stock: bool
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
