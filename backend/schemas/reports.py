# schemas/reports.py
from datetime import datetime, date
from typing import List, Optional
from pydantic import BaseModel

from schemas.product import ProductOut
from schemas.stock import StockAdjustmentOut


class ReportPeriod(BaseModel):
    start_date: date
    end_date: date
    group_by: Optional[str] = None


# ---- Sales by date ----
class SalesBucket(BaseModel):
    period: str
    label: str
    transactions: int
    items_sold: int
    subtotal: float
    discount: float
    tax: float
    total: float


class SalesSummary(BaseModel):
    total_transactions: int
    total_items: int
    total_sales: float
    total_discount: float
    total_tax: float
    average_sale: float


class SalesByDateReport(BaseModel):
    period: ReportPeriod
    items: List[SalesBucket]
    summary: SalesSummary


# ---- Sales by payment method ----
class PaymentMethodRow(BaseModel):
    payment_method: str
    transactions: int
    total: float
    percentage: float


class SalesByPaymentReport(BaseModel):
    period: ReportPeriod
    items: List[PaymentMethodRow]
    total: float


# ---- Sales by product / category ----
class ProductSalesRow(BaseModel):
    product_id: int
    product_name: str
    sku: str
    category_name: Optional[str] = None
    quantity: int
    revenue: float
    cost: float
    profit: float


class CategorySalesRow(BaseModel):
    category_id: Optional[int] = None
    category_name: str
    products: int
    quantity: int
    revenue: float
    percentage: float


# ---- Profit ----
class ProfitBucket(BaseModel):
    period: str
    label: str
    revenue: float
    cost: float
    profit: float
    margin: float


class ProfitReport(BaseModel):
    period: ReportPeriod
    items: List[ProfitBucket]
    revenue: float
    cost: float
    profit: float
    margin: float


# ---- Inventory ----
class InventoryCategoryRow(BaseModel):
    category_name: str
    products: int
    stock: int
    value: float


class InventoryReport(BaseModel):
    total_products: int
    active_products: int
    total_stock: int
    stock_value: float
    retail_value: float
    low_stock_count: int
    out_of_stock_count: int
    by_category: List[InventoryCategoryRow]
    low_stock_products: List[ProductOut]


# ---- Customers ----
class CustomerSalesRow(BaseModel):
    customer_id: Optional[int] = None
    customer_name: str
    transactions: int
    total_spent: float
    average_transaction: float
    last_purchase: Optional[datetime] = None


# ---- Tax ----
class TaxBucket(BaseModel):
    period: str
    label: str
    transactions: int
    taxable: float
    tax: float


class TaxReport(BaseModel):
    period: ReportPeriod
    items: List[TaxBucket]
    total_taxable: float
    total_tax: float


# ---- Stock adjustments ----
class AdjustmentTypeSummary(BaseModel):
    adjustment_type: str
    count: int
    quantity: int


class StockAdjustmentReport(BaseModel):
    period: ReportPeriod
    items: List[StockAdjustmentOut]
    summary: List[AdjustmentTypeSummary]


# ---- Staff ----
class StaffRow(BaseModel):
    user_id: int
    name: str
    role: str
    transactions: int
    items_sold: int
    total_sales: float
    average_sale: float
    voided: int
