from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional, Literal
from datetime import datetime, date

PaymentMethodType = Literal["cash", "card", "e-wallet"]


# Payment part of a checkout request
class PaymentDetails(BaseModel):
    payment_method: PaymentMethodType
    discount: float = Field(default=0.0, ge=0)
    amount_paid: Optional[float] = Field(default=None, ge=0)
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    notes: Optional[str] = None


# A line supplied directly to POST /transactions
class TransactionItemIn(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    discount: float = Field(default=0.0, ge=0)


class TransactionCreate(PaymentDetails):
    items: List[TransactionItemIn] = Field(min_length=1)


class VoidRequest(BaseModel):
    reason: Optional[str] = None


class TransactionItemOut(BaseModel):
    product_id: int
    product_name: str
    sku: str
    unit_price: float
    quantity: int
    discount: float
    line_total: float

    model_config = ConfigDict(from_attributes=True)


class TransactionOut(BaseModel):
    id: int
    invoice_number: str
    cashier_id: int
    cashier_name: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    subtotal: float
    discount: float
    tax: float
    total: float
    payment_method: str
    amount_paid: Optional[float] = None
    change: Optional[float] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime
    voided_at: Optional[datetime] = None
    items: List[TransactionItemOut] = []

    model_config = ConfigDict(from_attributes=True)


# Daily summary for the register close-out view
class PaymentBreakdown(BaseModel):
    payment_method: str
    count: int
    total: float


class HourlySales(BaseModel):
    hour: int
    time: str
    count: int
    amount: float


class DailySummary(BaseModel):
    date: date
    total_sales: int
    total_amount: float
    total_items: int
    payment_methods: List[PaymentBreakdown]
    hourly_sales: List[HourlySales]


# Receipt payload rendered by the front-end printer view
class ReceiptStore(BaseModel):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    currency: str


class ReceiptSale(BaseModel):
    invoice_number: str
    date: datetime
    cashier: Optional[str] = None
    customer: str
    payment_method: str
    status: str


class ReceiptTotals(BaseModel):
    subtotal: float
    discount: float
    tax: float
    total: float
    amount_paid: Optional[float] = None
    change: Optional[float] = None


class Receipt(BaseModel):
    store: ReceiptStore
    sale: ReceiptSale
    items: List[TransactionItemOut]
    totals: ReceiptTotals
    footer: Optional[str] = None
