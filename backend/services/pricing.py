# services/pricing.py
"""Cart arithmetic.

A cart is any iterable of lines exposing ``unit_price``, ``quantity`` and
``discount`` (an absolute amount per line, ``None`` meaning no discount).
Both persisted :class:`models.cart.CartItem` rows and :class:`CartLine`
values qualify.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from models.product import Product


@dataclass
class CartLine:
    product: Product
    quantity: int
    unit_price: float
    discount: Optional[float] = 0.0

    @property
    def product_id(self) -> int:
        return self.product.id


def line_total(line) -> float:
    return line.unit_price * line.quantity - (line.discount or 0)


def calculate_subtotal(cart: Iterable) -> float:
    return sum((line_total(line) for line in cart), 0.0)


def calculate_total(cart: Iterable, discount: Optional[float] = 0.0) -> float:
    # Not clamped at zero; checkout rejects a negative total itself
    return calculate_subtotal(cart) - (discount or 0)


def calculate_tax(taxable: float, tax_percentage: Optional[float]) -> float:
    if not tax_percentage:
        return 0.0
    return round(taxable * tax_percentage / 100, 2)


def calculate_change(amount_paid: float, total: float) -> float:
    return round(amount_paid - total, 2)
