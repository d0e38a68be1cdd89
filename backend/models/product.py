# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
from utils.timeutils import utcnow


# Product grouping used for filtering and category sales reports
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    description = Column(String, nullable=True)

    products = relationship("Product", back_populates="category")


# Model Product
# A sellable catalog item. Stock is changed only through stock adjustments
# (services/stock.py); the initial value is set when the product is created.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)
    barcode = Column(String, unique=True, nullable=True, index=True)
    description = Column(String)

    # Prices are guarded by check constraints.
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    cost = Column(Float, CheckConstraint("cost >= 0"), nullable=False, default=0.0)

    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)
    low_stock_threshold = Column(Integer, CheckConstraint("low_stock_threshold >= 0"), nullable=False, default=5)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    image_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    category = relationship("Category", back_populates="products")

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.low_stock_threshold
