from types import SimpleNamespace

import pytest

from services import pricing


def line(price, qty, discount=0.0):
    return SimpleNamespace(unit_price=price, quantity=qty, discount=discount)


def test_subtotal_of_empty_cart_is_zero():
    assert pricing.calculate_subtotal([]) == 0.0


def test_subtotal_sums_lines_minus_item_discounts():
    cart = [line(3500, 2), line(10000, 1, discount=500), line(2500, 4, discount=None)]
    assert pricing.calculate_subtotal(cart) == 7000 + 9500 + 10000


@pytest.mark.parametrize("discount", [0, 1000, 7000, 9000])
def test_total_is_subtotal_minus_discount(discount):
    cart = [line(3500, 2)]
    assert pricing.calculate_total(cart, discount) == pricing.calculate_subtotal(cart) - discount


def test_total_is_not_clamped_at_zero():
    assert pricing.calculate_total([line(1000, 1)], 1500) == -500


def test_none_discount_counts_as_zero():
    assert pricing.calculate_total([line(1000, 3)], None) == 3000


def test_cash_example_gives_change():
    cart = [line(3500, 2)]
    total = pricing.calculate_total(cart, 0)
    assert pricing.calculate_subtotal(cart) == total == 7000
    assert pricing.calculate_change(10000, total) == 3000


def test_tax_is_percentage_of_taxable_amount():
    assert pricing.calculate_tax(10000, 11) == 1100
    assert pricing.calculate_tax(10000, 0) == 0.0
    assert pricing.calculate_tax(10000, None) == 0.0
